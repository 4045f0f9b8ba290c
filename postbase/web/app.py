"""A local preview server.  The real output is the static build; this just
renders the same pages on request."""

from logging import getLogger
from typing import Optional

from flask import Flask, make_response
from werkzeug.wrappers.response import Response

from .. import exc
from ..config import Config, get_config
from ..logging import configure_logging
from ..store import load
from .bp import bp as blog_bp

logger = getLogger(__name__)

EXCEPTION_MESSAGE_CODE_MAP = {
    exc.PostDoesNotExistException: ("that post does not exist", 404),
    exc.DirectoryReadError: ("the content directory can't be read", 500),
}


def init_app(config: Optional[Config] = None, reload_store: bool = False) -> Flask:
    configure_logging()
    if config is None:
        config = get_config()
    app = Flask(__name__)
    app.config["POSTBASE_CONFIG"] = config
    app.config["POSTBASE_RELOAD_STORE"] = reload_store
    app.config["POSTBASE_STORE"] = load(
        config.content_dir, slug_source=config.slug_source, workers=config.workers
    )

    app.register_blueprint(blog_bp)

    @app.errorhandler(exc.PostbaseException)
    def handle_postbase_exceptions(e: exc.PostbaseException) -> Response:
        try:
            message, http_code = EXCEPTION_MESSAGE_CODE_MAP[e.__class__]
        except KeyError:
            # An exception we don't have a canned response for - reraise it
            raise e
        resp = make_response(f"http error code {http_code}: {message}")
        resp.status_code = http_code
        return resp

    return app
