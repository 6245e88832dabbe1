"""Engine assembly and external converter module loading."""

from __future__ import annotations

import importlib
import importlib.util
import logging
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from file_converter.application.ports import Converter
from file_converter.converters import builtin_converters
from file_converter.engine.engine import ConversionEngine
from file_converter.errors import ConverterLoadError

logger = logging.getLogger(__name__)


def create_engine(converters: Iterable[Converter]) -> ConversionEngine:
    """Build an engine over exactly ``converters``, in the given order."""
    return ConversionEngine(converters)


def create_default_engine(extra_modules: Iterable[str] | None = None) -> ConversionEngine:
    """Create an engine with the built-in converters.

    Parameters
    ----------
    extra_modules : Iterable[str] | None, optional
        Import paths or file paths of modules providing additional
        converters. Their converters are registered ahead of the built-ins,
        so they take priority for every pair they support.

    Returns
    -------
    ConversionEngine
        Engine with external and built-in converters.

    Raises
    ------
    ConverterLoadError
        If a module cannot be imported or exposes no converters.
    """
    external: list[Converter] = []
    for module_or_path in extra_modules or []:
        loaded = load_converters(module_or_path)
        logger.info("Loaded %d converter(s) from %s", len(loaded), module_or_path)
        external.extend(loaded)
    return create_engine([*external, *builtin_converters()])


def load_converters(module_or_path: str) -> list[Converter]:
    """Load converter objects from a module name or file path.

    .. warning::
        This executes code from the specified module. Only load converter
        modules from trusted sources.
    """
    module = _import_module_or_path(module_or_path)
    converters = _converters_from_module(module)
    for converter in converters:
        if not isinstance(converter, Converter):
            raise ConverterLoadError(
                f"Object {converter!r} from '{module_or_path}' does not implement "
                "the converter interface."
            )
    return converters


def _import_module_or_path(module_or_path: str) -> ModuleType:
    """Import module by import path or filesystem path.

    Raises
    ------
    ConverterLoadError
        If import cannot be completed.
    """
    candidate = Path(module_or_path)
    if candidate.exists():
        spec = importlib.util.spec_from_file_location(candidate.stem, candidate)
        if spec is None or spec.loader is None:
            raise ConverterLoadError(f"Unable to load converter module from {candidate}.")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise ConverterLoadError(
                f"Unable to execute converter module {candidate}: {exc}"
            ) from exc
        return module

    try:
        return importlib.import_module(module_or_path)
    except Exception as exc:
        raise ConverterLoadError(
            f"Unable to import converter module '{module_or_path}': {exc}"
        ) from exc


def _converters_from_module(module: ModuleType) -> list[Converter]:
    if hasattr(module, "register_converters"):
        collected: list[Converter] = []
        module.register_converters(collected)
        return collected

    converters_obj = getattr(module, "CONVERTERS", None)
    if converters_obj is not None:
        return list(converters_obj)

    converter_obj = getattr(module, "CONVERTER", None)
    if converter_obj is not None:
        return [converter_obj]

    raise ConverterLoadError(
        "Converter module must expose register_converters(converters), CONVERTERS, or CONVERTER."
    )
