# soapwire/utils/templating.py
"""
Jinja2 environment for the SOAP XML templates shipped with the package.
"""

import logging
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template

logger: logging.Logger = logging.getLogger(__name__)

TEMPLATES_DIR: Path = Path(__file__).resolve().parent.parent / 'templates'


@lru_cache(maxsize=1)
def get_template_environment() -> Environment:
    """
    Return the shared Jinja2 environment for soapwire templates.

    Variables are XML-escaped automatically; pre-rendered XML fragments
    must be marked with the 'safe' filter inside the template.

    Raises:
        FileNotFoundError: If the templates directory is missing.
    """
    if not TEMPLATES_DIR.exists():
        error_message: str = f'Templates directory not found at: {TEMPLATES_DIR}'
        logger.error(error_message)
        raise FileNotFoundError(error_message)

    environment: Environment = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    logger.debug('Jinja2 environment initialized with templates from: %r', TEMPLATES_DIR)
    return environment


def get_template(template_name: str) -> Template:
    """
    Load a template by file name, e.g. 'envelope.xml'.

    Raises:
        jinja2.TemplateNotFound: If the template file doesn't exist.
    """
    return get_template_environment().get_template(template_name)
