"""Default configuration: single source of truth for default fit parameters."""

from ergmfit.config.experiment import FitConfig, ModelConfig, TermConfig

# Edges-only model with all-default chain, estimator and GOF settings.
DEFAULT_CONFIG = FitConfig()

# Covariate plus clustering specification used for cosponsorship-style data:
# edges + absdiff(age) + nodematch(party) + gwesp(0.5).
COVARIATE_GWESP_MODEL = ModelConfig(
    terms=(
        TermConfig(name="edges"),
        TermConfig(name="absdiff", attribute="age"),
        TermConfig(name="nodematch", attribute="party"),
        TermConfig(name="gwesp", decay=0.5),
    )
)
