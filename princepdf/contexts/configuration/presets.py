"""
Option sets from configuration files.

A preset file is a YAML mapping of RenderOptions field names to values,
with an optional `encryption` sub-mapping:

    exe_path: /opt/prince/bin/prince
    input_type: html
    style_sheets: [styles/print.css]
    pdf_author: Finance Team
    compress: false
    encryption:
      key_bits: 128
      user_password: ${oc.env:PDF_USER_PASSWORD}
      owner_password: ${oc.env:PDF_OWNER_PASSWORD}
      disallow_copy: true

Interpolations are resolved by OmegaConf, so secrets can come from the
environment instead of the file.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from omegaconf import OmegaConf

from princepdf.contexts.configuration.exceptions import InvalidOptionError
from princepdf.contexts.configuration.logger import _log_debug, _log_warning
from princepdf.contexts.configuration.options import RenderOptions

ENCRYPTION_KEY = "encryption"


def options_from_mapping(
    mapping: Mapping[str, Any], base: Optional[RenderOptions] = None
) -> RenderOptions:
    """
    Apply a mapping of option values on top of an option set.

    Args:
        mapping: Field name -> value. `encryption` may be a mapping of
                 with_encryption() arguments, or None to disable encryption.
        base: Option set to start from (default: RenderOptions())

    Returns:
        New RenderOptions

    Raises:
        InvalidOptionError: For unknown option names or invalid values
    """
    options = base if base is not None else RenderOptions()
    values = dict(mapping)

    encryption = values.pop(ENCRYPTION_KEY, ...)
    input_type = values.pop("input_type", None)

    options = options.with_options(**values)

    if input_type is not None:
        options = options.with_input_type(input_type)

    if encryption is None:
        options = options.without_encryption()
    elif encryption is not ...:
        if not isinstance(encryption, Mapping):
            raise InvalidOptionError(
                "encryption must be a mapping of encryption parameters",
                option=ENCRYPTION_KEY,
                value=encryption,
            )
        try:
            options = options.with_encryption(**encryption)
        except TypeError as e:
            raise InvalidOptionError(
                f"Invalid encryption parameters: {e}", option=ENCRYPTION_KEY
            ) from e

    return options


def load_options_dict(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a preset file into a plain dict with interpolations resolved."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Options file not found: {config_path}")

    data = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
    if not data:
        _log_warning(f"Options file is empty: {config_path}")
        return {}
    if not isinstance(data, dict):
        raise InvalidOptionError(f"Options file must contain a mapping: {config_path}")
    return data


def load_options(
    config_path: Union[str, Path], base: Optional[RenderOptions] = None
) -> RenderOptions:
    """
    Load a RenderOptions preset from a YAML file.

    Args:
        config_path: Path to the YAML file
        base: Option set the file is applied on top of

    Returns:
        New RenderOptions

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidOptionError: If the file contains unknown options or bad values
    """
    data = load_options_dict(config_path)
    _log_debug(f"Loaded {len(data)} options from {config_path}")
    return options_from_mapping(data, base=base)
