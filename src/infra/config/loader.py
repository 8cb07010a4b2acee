from pathlib import Path
from typing import TextIO

import structlog
import yaml
from pydantic import ValidationError

from core.domain.configuration import Configuration
from core.exceptions.configuration_error import ConfigurationError
from infra.config.schemas import ConfigurationDocument

logger = structlog.stdlib.get_logger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    messages = []

    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "<root>"
        messages.append(f"{location}: {detail['msg']}")

    return "; ".join(messages)


def load_configuration_from_stream(stream: TextIO | str, source: str = "<stream>") -> Configuration:
    try:
        raw = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        raise ConfigurationError(source, f"malformed YAML document: {e}") from e

    if raw is None:
        raw = {}

    if not isinstance(raw, dict):
        raise ConfigurationError(source, f"expected a mapping at the document root, got {type(raw).__name__}")

    try:
        document = ConfigurationDocument.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(source, _format_validation_error(e)) from e

    configuration = document.to_domain()

    logger.info(
        f"Loaded configuration from {source}: "
        f"{len(configuration.backends)} backend(s), {configuration.count_health_checks()} health check(s)"
    )

    return configuration


def load_configuration(path: str | Path) -> Configuration:
    path = Path(path)

    try:
        with path.open(encoding="utf-8") as stream:
            return load_configuration_from_stream(stream, source=str(path))
    except UnicodeDecodeError as e:
        raise ConfigurationError(str(path), f"file is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigurationError(str(path), f"cannot read file: {e.strerror or e}") from e
