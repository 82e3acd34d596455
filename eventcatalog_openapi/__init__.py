from .config import Settings, settings
from .errors import (
    GeneratorError,
    ConfigurationError,
    SpecValidationError,
    SpecFetchError,
    CatalogWriteError,
)
from .models import GeneratorOptions, ServiceSpec, DomainSpec
from .services.generator import Generator, GeneratorReport, run_generator

__version__ = "0.1.0"
