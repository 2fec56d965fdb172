from solar_relay.core.config import load_settings
from solar_relay.core.logging import configure_logging
from solar_relay.factory import create_app

settings = load_settings()
configure_logging(settings.log_level)
app = create_app(settings)
