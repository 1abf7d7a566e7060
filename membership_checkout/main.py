from membership_checkout.core.registrar import register_app

app = register_app()
