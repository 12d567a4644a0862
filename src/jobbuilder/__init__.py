from .artifacts import reconcile
from .assembler import assemble
from .decode import decode_request
from .errors import ConfigError, DecodeError, DecodePhase, JobBuilderError, RegistrationError
from .model import Artifact, CanonicalJob, JobSpec

__version__ = "0.1.0"

__all__ = [
    "reconcile", "assemble", "decode_request",
    "ConfigError", "DecodeError", "DecodePhase", "JobBuilderError", "RegistrationError",
    "Artifact", "CanonicalJob", "JobSpec",
]
