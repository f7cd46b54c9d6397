import re
import logging
from functools import lru_cache
from pathlib import Path
from typing import Tuple, Dict, Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from .. import __version__

logger = logging.getLogger("Xcribe.Templates")

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
SYSTEM_INSTRUCTION_TEMPLATE = "system_instruction.j2"

_FRONT_MATTER = re.compile(r"\A---\n(.*?)\n---\n?(.*)\Z", re.DOTALL)

_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    undefined=StrictUndefined,
    keep_trailing_newline=False,
    autoescape=False,
)


def parse_template(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Split optional YAML front matter from a template body.

        ---
        key: value
        ---
        Template body...

    Unparseable front matter is logged and the content is returned untouched.
    """
    match = _FRONT_MATTER.match(content)
    if not match:
        return {}, content

    try:
        metadata = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse front matter: {e}")
        return {}, content
    return metadata, match.group(2)


def render_template(name: str, **context: Any) -> str:
    """Render a packaged template; front matter values are template variables, ``context`` wins."""
    try:
        source, path, _ = _environment.loader.get_source(_environment, name)
    except TemplateNotFound:
        raise FileNotFoundError(f"Template '{name}' not found in {TEMPLATES_DIR}.")

    metadata, body = parse_template(source)
    logger.debug(f"Rendering template {path}")
    return _environment.from_string(body).render(**{**metadata, **context}).strip()


@lru_cache(maxsize=None)
def get_system_instruction() -> str:
    """The fixed system instruction: assistant persona and global output rules."""
    return render_template(SYSTEM_INSTRUCTION_TEMPLATE, version=__version__)
