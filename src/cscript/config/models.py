"""
Compile Configuration — Settings for one compiler invocation.

Populated from command-line options first, then from `@directive` lines in
the source document.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from cscript.vocabulary import OptLevel


DEFAULT_HOT_SET_SIZE = 16
DEFAULT_PROFILE_TIMEOUT_SECONDS = 60.0
DEFAULT_LEARNING_STORE = Path.home() / ".cscript" / "arms.txt"


class CompileConfig(BaseModel):
    """
    Complete configuration for a compile.

    `hardline_mode` is the effective runtime-assertion policy: enum assert
    helpers abort when it is on and only warn when it is off.
    """

    model_config = {"extra": "forbid"}

    # Checking policy
    hardline: bool = Field(default=True, description="Enable runtime enum assertions and strict warnings")
    softline: bool = Field(default=True, description="Enable syntactic sugar lowering")
    strict: bool = Field(default=False, description="Force hardline checking")
    relaxed: bool = Field(default=False, description="Runtime enum assertions warn instead of abort")
    warn_as_error: bool = Field(default=False, description="Pass -Werror to the C compiler")

    # Code generation
    opt: OptLevel = Field(default=OptLevel.O2, description="Optimization level")
    lto: bool = Field(default=True, description="Link-time optimization")
    fast_math: bool = Field(default=False, description="Relaxed floating point")
    debug: bool = Field(default=False, description="Emit debug symbols")
    target: str = Field(default="", description="Target triple")
    abi: str = Field(default="", description="ABI compatibility tag")

    # Profile-guided optimization
    profile: bool = Field(default=False, description="Run the two-pass PGO loop")
    hot_set_size: int = Field(default=DEFAULT_HOT_SET_SIZE, ge=0, description="Maximum hot functions")
    profile_timeout_seconds: float = Field(
        default=DEFAULT_PROFILE_TIMEOUT_SECONDS,
        gt=0,
        description="Kill the instrumented run after this many seconds",
    )

    # Adaptive build selection
    adaptive: bool = Field(default=False, description="Choose build knobs with the bandit learner")
    learning_store_path: Path | None = Field(
        default=None,
        description="Arm statistics file (default ~/.cscript/arms.txt)",
    )

    # Toolchain inputs
    out: str = Field(default="a.out", description="Output executable path")
    defines: list[str] = Field(default_factory=list)
    incs: list[str] = Field(default_factory=list)
    libpaths: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    cc_prefer: str = Field(default="", description="Preferred C compiler")

    # Driver behaviour
    show_c: bool = Field(default=False, description="Echo the generated C to stderr")
    verbose: bool = Field(default=False)
    keep_temps: bool = Field(default=False, description="Retain intermediate artifacts")

    @field_validator("out")
    @classmethod
    def out_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("out cannot be empty")
        return v

    @model_validator(mode="after")
    def check_policy(self) -> "CompileConfig":
        if self.strict and self.relaxed:
            raise ValueError("strict and relaxed are mutually exclusive")
        if self.strict:
            self.hardline = True
        return self

    @property
    def hardline_mode(self) -> bool:
        return self.hardline and not self.relaxed

    def resolved_learning_store_path(self) -> Path:
        return self.learning_store_path or DEFAULT_LEARNING_STORE


def create_config(**kwargs) -> CompileConfig:
    """Factory for compile configurations."""
    return CompileConfig(**kwargs)
