"""
Parameter normalization for OAuth1

Both the signature base string and the Authorization header are built from the
same sorted, percent-encoded parameter list; only the serialization differs.
"""

from typing import List, Tuple

from .utils import percent_encode, as_parameter_list, ParameterInput


def normalize_parameters(parameters: ParameterInput) -> List[Tuple[str, str]]:
    """
    Percent-encode every name and value, then sort by encoded name and value.

    Repeated names are all kept and ordered by their encoded value.

    Args:
        parameters: Mapping or sequence of (name, value) pairs

    Returns:
        list: Sorted list of encoded (name, value) pairs
    """
    encoded = [
        (percent_encode(name), percent_encode(value))
        for name, value in as_parameter_list(parameters)
    ]
    # Encoded text is pure ASCII, so str ordering is byte ordering
    encoded.sort()
    return encoded


def to_base_string_parameters(parameters: ParameterInput) -> str:
    """
    Serialize parameters for the signature base string: ``k=v`` joined by ``&``.

    Args:
        parameters: Mapping or sequence of (name, value) pairs

    Returns:
        str: Normalized parameter string
    """
    return "&".join(f"{name}={value}" for name, value in normalize_parameters(parameters))


def to_header_string(parameters: ParameterInput) -> str:
    """
    Serialize parameters for the Authorization header: ``k="v"`` joined by ``, ``.

    Args:
        parameters: Mapping or sequence of (name, value) pairs

    Returns:
        str: Header parameter list, without the "OAuth " prefix
    """
    return ", ".join(f'{name}="{value}"' for name, value in normalize_parameters(parameters))
