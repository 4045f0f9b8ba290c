from flask import current_app

from ..config import Config
from ..store import Store, load
from ..build import site_from_config
from ..value_objs import Site


def get_postbase_config() -> Config:
    return current_app.config["POSTBASE_CONFIG"]


def get_site() -> Site:
    return site_from_config(get_postbase_config())


def get_store() -> Store:
    """The store, reloaded from disk first if the app was asked to."""
    if current_app.config["POSTBASE_RELOAD_STORE"]:
        config = get_postbase_config()
        current_app.config["POSTBASE_STORE"] = load(
            config.content_dir, slug_source=config.slug_source, workers=config.workers
        )
    return current_app.config["POSTBASE_STORE"]
