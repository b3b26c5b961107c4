from __future__ import annotations

# Hugging Face Spaces entrypoint for Gradio
# Exposes a global `demo` variable that HF will serve.

from pixshop.config import configure_logging, load_settings
from scripts.gradio_app import app as create_app

configure_logging(load_settings().log_level)
demo = create_app()
