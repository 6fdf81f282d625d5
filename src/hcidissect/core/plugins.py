from __future__ import annotations

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from hcidissect.core.dispatch import DecodeContext
    from hcidissect.core.reader import FieldReader


PayloadDecoder = Callable[["FieldReader", "DecodeContext"], None]

_PSM_DECODERS: dict[int, PayloadDecoder] = {}
_PSM_PLUGIN_NAMES: dict[int, str] = {}


def register_psm(psm: int, name: str) -> Callable[[PayloadDecoder], PayloadDecoder]:
    """Register the payload decoder for channels carrying `psm`."""

    def _decorator(decoder: PayloadDecoder) -> PayloadDecoder:
        if psm in _PSM_DECODERS and _PSM_DECODERS[psm] is not decoder:
            raise ValueError(f"Duplicate PSM decoder: {psm:#06x}")
        _PSM_DECODERS[psm] = decoder
        _PSM_PLUGIN_NAMES[psm] = name
        return decoder

    return _decorator


def get_psm_decoder(psm: int) -> PayloadDecoder | None:
    return _PSM_DECODERS.get(psm)


def psm_name(psm: int) -> str | None:
    return _PSM_PLUGIN_NAMES.get(psm)


def load_builtin_plugins() -> None:
    # Import for side-effects (registration).
    from hcidissect.plugins import protocols as _protocols  # noqa: F401


def list_plugins() -> dict[str, dict[str, str]]:
    return {"psm": {f"{psm:#06x}": _PSM_PLUGIN_NAMES[psm] for psm in sorted(_PSM_DECODERS)}}
