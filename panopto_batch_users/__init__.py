"""Batch user provisioning for Panopto: folder, user, and Creator access per record."""

__version__ = "0.1.0-dev"

from .config import (
	AppConfig,
	ConfigError,
	ConfigFileError,
	MissingEnvError,
	load_app_config,
)
from .models import (
	EMPTY_ID,
	AccessRole,
	Credentials,
	ProvisioningRecord,
	ProvisioningResult,
)
from .services import PanoptoServices, ServiceError
from .provisioning import provision_user, run_provisioning
from .batch import BatchProvisioner, BatchReport

__all__ = [
	"__version__",
	"EMPTY_ID",
	"AccessRole",
	"AppConfig",
	"BatchProvisioner",
	"BatchReport",
	"ConfigError",
	"ConfigFileError",
	"Credentials",
	"MissingEnvError",
	"PanoptoServices",
	"ProvisioningRecord",
	"ProvisioningResult",
	"ServiceError",
	"load_app_config",
	"provision_user",
	"run_provisioning",
]
