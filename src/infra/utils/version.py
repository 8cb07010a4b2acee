import importlib.metadata
import importlib.util
from pathlib import Path

DISTRIBUTION_NAME = "griffin"


def get_version() -> str:
    default_version = "0.1.0"
    project_root = Path(__file__).parent.parent.parent.parent

    version_module_path = project_root / "version.py"

    if version_module_path.is_file():
        spec = importlib.util.spec_from_file_location("version", version_module_path)

        if spec is None or spec.loader is None:
            return default_version

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        return getattr(module, "__version__", default_version)

    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        return default_version
