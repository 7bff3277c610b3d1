"""
Build Arms — The discrete optimization settings the learner chooses from.

An arm is an immutable (opt level, LTO, fast-math) triple with a stable
text key, `opt=O2;lto=1;ffm=0`, used as the learning-store key.
"""

import hashlib
from dataclasses import dataclass
from itertools import product

from cscript.config import CompileConfig
from cscript.vocabulary import OptLevel


PRIOR_SCALE = 0.01

DEFAULT_OPT_LEVELS = (OptLevel.O1, OptLevel.O2, OptLevel.O3, OptLevel.SIZE)


@dataclass(frozen=True)
class BuildArm:
    """One combination of optimization knobs."""
    opt: OptLevel = OptLevel.O2
    lto: bool = True
    fast_math: bool = False

    @property
    def key(self) -> str:
        return f"opt={self.opt.value};lto={int(self.lto)};ffm={int(self.fast_math)}"

    @classmethod
    def from_key(cls, key: str) -> "BuildArm":
        """
        Parse a key produced by `key`.

        Raises:
            ValueError: Malformed key or unknown opt level
        """
        fields: dict[str, str] = {}
        for part in key.split(";"):
            name, sep, value = part.partition("=")
            if not sep:
                raise ValueError(f"malformed arm key {key!r}")
            fields[name.strip()] = value.strip()
        if set(fields) != {"opt", "lto", "ffm"}:
            raise ValueError(f"malformed arm key {key!r}")
        if fields["lto"] not in ("0", "1") or fields["ffm"] not in ("0", "1"):
            raise ValueError(f"malformed arm key {key!r}")
        return cls(
            opt=OptLevel(fields["opt"]),
            lto=fields["lto"] == "1",
            fast_math=fields["ffm"] == "1",
        )

    @classmethod
    def from_config(cls, config: CompileConfig) -> "BuildArm":
        """The arm a config asks for when the learner is off."""
        return cls(opt=config.opt, lto=config.lto, fast_math=config.fast_math)

    def __str__(self) -> str:
        return self.key


def default_arms() -> list[BuildArm]:
    """{O1, O2, O3, size} × LTO × fast-math, in key order."""
    arms = [
        BuildArm(opt, lto, ffm)
        for opt, lto, ffm in product(DEFAULT_OPT_LEVELS, (False, True), (False, True))
    ]
    return sorted(arms, key=lambda a: a.key)


def prior(arm: BuildArm) -> float:
    """Small deterministic per-arm bias in [0, PRIOR_SCALE)."""
    digest = hashlib.sha1(arm.key.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") / 2**64 * PRIOR_SCALE
