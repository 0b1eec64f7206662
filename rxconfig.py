import os

from dotenv import load_dotenv
import reflex as rx

from mis_canchas.utils.db import database_url

load_dotenv()

config = rx.Config(
    app_name="mis_canchas",
    # Reflex usa el driver sincrono; los servicios usan el asincrono.
    db_url=database_url(async_driver=False),
    api_url=os.getenv("API_URL", "http://localhost:8000"),
    plugins=[rx.plugins.TailwindV3Plugin()],
    disable_plugins=["reflex.plugins.sitemap.SitemapPlugin"],
    telemetry_enabled=False,
)
