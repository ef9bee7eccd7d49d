from __future__ import annotations

import os
from typing import Mapping

METHODS: tuple[str, ...] = ("lu", "numpy", "qr", "gauss", "auto")

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"", "0", "false", "no", "off"})


def normalize_method(name: str) -> str:
    method = str(name).strip().lower()
    if method not in METHODS:
        raise ValueError(f"Unknown inversion method: {name!r} (expected one of {', '.join(METHODS)})")
    return method


def _parse_flag(raw: str, *, env_var: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{env_var} must be a boolean flag, got {raw!r}")


def _parse_rtol(raw: str, *, env_var: str) -> float | None:
    if not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{env_var} must be a float, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{env_var} must be non-negative, got {raw!r}")
    return value


class Settings:
    """Process-wide defaults, read lazily from the environment.

    Programmatic overrides win over the environment until ``reset`` is called.
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        method_env_var: str = "CACHEMATRIX_INVERT_METHOD",
        rtol_env_var: str = "CACHEMATRIX_RTOL",
        verbose_env_var: str = "CACHEMATRIX_VERBOSE",
    ) -> None:
        self._environ = environ
        self._method_env_var = method_env_var
        self._rtol_env_var = rtol_env_var
        self._verbose_env_var = verbose_env_var
        self._method: str | None = None
        self._rtol: float | None = None
        self._rtol_loaded = False
        self._verbose: bool | None = None

    def _env(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    @property
    def method(self) -> str:
        if self._method is None:
            raw = self._env().get(self._method_env_var)
            self._method = normalize_method(raw) if raw else "lu"
        return self._method

    @method.setter
    def method(self, value: str) -> None:
        self._method = normalize_method(value)

    @property
    def rtol(self) -> float | None:
        if not self._rtol_loaded:
            raw = self._env().get(self._rtol_env_var)
            self._rtol = _parse_rtol(raw, env_var=self._rtol_env_var) if raw is not None else None
            self._rtol_loaded = True
        return self._rtol

    @rtol.setter
    def rtol(self, value: float | None) -> None:
        if value is not None:
            value = float(value)
            if value < 0:
                raise ValueError("rtol must be non-negative")
        self._rtol = value
        self._rtol_loaded = True

    @property
    def verbose(self) -> bool:
        if self._verbose is None:
            raw = self._env().get(self._verbose_env_var)
            self._verbose = _parse_flag(raw, env_var=self._verbose_env_var) if raw is not None else False
        return self._verbose

    @verbose.setter
    def verbose(self, value: bool) -> None:
        self._verbose = bool(value)

    def reset(self) -> None:
        self._method = None
        self._rtol = None
        self._rtol_loaded = False
        self._verbose = None

    def as_dict(self) -> dict[str, object]:
        return {"method": self.method, "rtol": self.rtol, "verbose": self.verbose}


_default_settings = Settings()


def default_instance() -> Settings:
    return _default_settings
