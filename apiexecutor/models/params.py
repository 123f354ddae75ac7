"""
Request parameters.

An ordered multi-map of form parameters with typed access to the
well-known keys sent with every API method.
"""

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode

VERSION_KEY = "v"
LANG_KEY = "lang"
DEVICE_ID_KEY = "device_id"
ACCESS_TOKEN_KEY = "access_token"
ANONYMOUS_TOKEN_KEY = "anonymous_token"

DEFAULT_VERSION = "5.141"
DEFAULT_LANG = "ru"

ParamValue = Union[str, int, float, bool]


def _to_str(value: ParamValue) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class Params:
    """
    Form parameters of one API request.

    ``set`` overwrites every value of a key, ``add`` appends one more value.
    """

    def __init__(
        self,
        values: Optional[Mapping[str, Union[ParamValue, Iterable[ParamValue]]]] = None,
        version: str = DEFAULT_VERSION,
        lang: str = DEFAULT_LANG,
        remove_blanks: bool = False,
    ):
        self._values: Dict[str, List[str]] = {}
        self.remove_blanks = remove_blanks
        self.set(VERSION_KEY, version)
        self.set(LANG_KEY, lang)
        if values:
            for key, value in values.items():
                if isinstance(value, (list, tuple)):
                    self._values[key] = [_to_str(v) for v in value]
                else:
                    self.set(key, value)

    @classmethod
    def from_query(
        cls, query: Union[str, Mapping[str, Union[ParamValue, Iterable[ParamValue]]]]
    ) -> "Params":
        """Build params from a query string or a mapping (e.g. ``httpx.URL(...).params``)."""
        if isinstance(query, str):
            values: Dict[str, List[str]] = {}
            for key, value in parse_qsl(query, keep_blank_values=True):
                values.setdefault(key, []).append(value)
            return cls(values)
        if hasattr(query, "multi_items"):
            values = {}
            for key, value in query.multi_items():
                values.setdefault(key, []).append(value)
            return cls(values)
        return cls(query)

    # Generic access

    def set(self, key: str, value: ParamValue) -> None:
        self._values[key] = [_to_str(value)]

    def add(self, key: str, value: ParamValue) -> None:
        self._values.setdefault(key, []).append(_to_str(value))

    def get(self, key: str, default: str = "") -> str:
        """Return the first value of ``key``."""
        values = self._values.get(key)
        return values[0] if values else default

    def get_list(self, key: str) -> List[str]:
        return list(self._values.get(key, []))

    def has(self, key: str) -> bool:
        return key in self._values

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def items(self) -> Iterator[Tuple[str, str]]:
        """Iterate over (key, value) pairs, one pair per value."""
        for key, values in self._values.items():
            for value in values:
                yield key, value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    # Well-known keys

    @property
    def version(self) -> str:
        return self.get(VERSION_KEY)

    @version.setter
    def version(self, value: str) -> None:
        self.set(VERSION_KEY, value)

    @property
    def lang(self) -> str:
        return self.get(LANG_KEY)

    @lang.setter
    def lang(self, value: str) -> None:
        self.set(LANG_KEY, value)

    @property
    def device_id(self) -> str:
        return self.get(DEVICE_ID_KEY)

    @device_id.setter
    def device_id(self, value: str) -> None:
        self.set(DEVICE_ID_KEY, value)

    @property
    def access_token(self) -> str:
        return self.get(ACCESS_TOKEN_KEY)

    @access_token.setter
    def access_token(self, value: str) -> None:
        self.set(ACCESS_TOKEN_KEY, value)

    @property
    def anonymous_token(self) -> str:
        return self.get(ANONYMOUS_TOKEN_KEY)

    @anonymous_token.setter
    def anonymous_token(self, value: str) -> None:
        self.set(ANONYMOUS_TOKEN_KEY, value)

    # Serialization

    def compose_values(self) -> Dict[str, List[str]]:
        """
        Return a copy of all values.

        With ``remove_blanks`` keys whose values are all empty are left out
        of the result; the params themselves are not changed.
        """
        return {
            key: list(values)
            for key, values in self._values.items()
            if not self.remove_blanks or any(v != "" for v in values)
        }

    def encode(self) -> str:
        """Form-urlencode the params, keys sorted."""
        composed = self.compose_values()
        return urlencode(sorted(composed.items()), doseq=True)

    def copy(self) -> "Params":
        clone = Params(remove_blanks=self.remove_blanks)
        clone._values = {key: list(values) for key, values in self._values.items()}
        return clone

    def __str__(self) -> str:
        return self.encode()

    def __repr__(self) -> str:
        return f"Params({self._values!r})"
