"""Fit configuration dataclasses: all frozen and slotted for immutability."""

from dataclasses import dataclass, field

TERM_NAMES = (
    "edges",
    "nodecov",
    "nodematch",
    "absdiff",
    "triangle",
    "kstar",
    "gwesp",
    "gwdegree",
)
PROPOSALS = ("random", "tnt")
METHODS = ("auto", "mple", "mcmcmle")
GOF_STATISTICS = ("degree", "esp", "distance", "model")


@dataclass(frozen=True, slots=True)
class TermConfig:
    """One model term. Only the fields the named term uses need to be set."""

    name: str
    attribute: str | None = None  # covariate name (nodecov, nodematch, absdiff)
    decay: float | None = None  # fixed decay (gwesp, gwdegree)
    k: int | None = None  # star size (kstar)
    pow: float | None = None  # exponent on the difference (absdiff)


@dataclass(frozen=True, slots=True)
class ModelConfig:
    """Ordered ERGM term list."""

    terms: tuple[TermConfig, ...] = (TermConfig(name="edges"),)


@dataclass(frozen=True, slots=True)
class MCMCConfig:
    """Metropolis-Hastings chain parameters used during estimation."""

    burn_in: int = 2000
    interval: int = 20  # toggles between retained samples
    sample_size: int = 512
    proposal: str = "tnt"  # "random" or "tnt"
    max_steps: int = 10_000_000  # hard cap on toggles per chain run


@dataclass(frozen=True, slots=True)
class EstimationConfig:
    """MPLE and MCMC-MLE estimator parameters."""

    method: str = "auto"  # "auto", "mple" or "mcmcmle"
    max_iterations: int = 30
    tolerance: float = 0.05  # stop when ||step|| falls below this
    step_damping: float = 0.5
    drift_window: int = 4
    degeneracy_threshold: float = 0.99
    mple_max_iterations: int = 100
    mple_tolerance: float = 1e-10


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    """Simulation parameters for post-fit sampling."""

    n_sim: int = 100
    burn_in: int = 2000
    interval: int = 50
    n_chains: int = 1
    proposal: str = "tnt"


@dataclass(frozen=True, slots=True)
class GOFConfig:
    """Goodness-of-fit statistics and sample size."""

    statistics: tuple[str, ...] = GOF_STATISTICS
    n_sim: int = 100


@dataclass(frozen=True, slots=True)
class FitConfig:
    """Top-level fit configuration composing all sub-configs.

    All fields are frozen and typed. Cross-parameter validation runs
    in __post_init__ to reject invalid configurations early.
    """

    model: ModelConfig = field(default_factory=ModelConfig)
    mcmc: MCMCConfig = field(default_factory=MCMCConfig)
    estimation: EstimationConfig = field(default_factory=EstimationConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    gof: GOFConfig = field(default_factory=GOFConfig)
    seed: int = 42
    description: str = ""
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.model.terms:
            raise ValueError("model must contain at least one term")
        for term in self.model.terms:
            if term.name not in TERM_NAMES:
                raise ValueError(
                    f"Unknown term {term.name!r}; expected one of {TERM_NAMES}"
                )
        for proposal in (self.mcmc.proposal, self.simulation.proposal):
            if proposal not in PROPOSALS:
                raise ValueError(
                    f"proposal must be one of {PROPOSALS}, got {proposal!r}"
                )
        if self.estimation.method not in METHODS:
            raise ValueError(
                f"method must be one of {METHODS}, "
                f"got {self.estimation.method!r}"
            )
        if self.mcmc.sample_size < 2:
            raise ValueError(
                f"sample_size ({self.mcmc.sample_size}) must be >= 2"
            )
        if self.mcmc.interval < 1 or self.simulation.interval < 1:
            raise ValueError("interval must be >= 1")
        if self.mcmc.burn_in < 0 or self.simulation.burn_in < 0:
            raise ValueError("burn_in must be >= 0")
        if not 0.5 < self.estimation.degeneracy_threshold < 1.0:
            raise ValueError(
                f"degeneracy_threshold ({self.estimation.degeneracy_threshold}) "
                f"must lie in (0.5, 1)"
            )
        if not 0.0 < self.estimation.step_damping <= 1.0:
            raise ValueError(
                f"step_damping ({self.estimation.step_damping}) must lie in (0, 1]"
            )
        if self.simulation.n_chains < 1:
            raise ValueError(
                f"n_chains ({self.simulation.n_chains}) must be >= 1"
            )
        unknown = set(self.gof.statistics) - set(GOF_STATISTICS)
        if unknown:
            raise ValueError(f"Unknown GOF statistics: {sorted(unknown)}")
