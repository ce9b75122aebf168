"""Constants for the eSCL client."""

import os
from logging import Logger, getLogger

DEBUG = os.environ.get("DEBUG", "false").lower() == "true"
LOGGER: Logger = getLogger(__package__)

# Resource paths, appended to the scanner base URL
CAPABILITIES_PATH = "ScannerCapabilities"
STATUS_PATH = "ScannerStatus"
SCAN_JOBS_PATH = "ScanJobs"
# Appended to a job URL
NEXT_DOCUMENT_PATH = "NextDocument"

SETTINGS_CONTENT_TYPE = "text/xml"

# XML namespaces
SCAN_NAMESPACE = "http://schemas.hp.com/imaging/escl/2011/05/03"
PWG_NAMESPACE = "http://www.pwg.org/schemas/2010/12/sm"
NAMESPACE_PREFIXES = {SCAN_NAMESPACE: "scan", PWG_NAMESPACE: "pwg"}

DEFAULT_VERSION = "2.0"
THREE_HUNDREDTHS_OF_INCHES = "escl:ThreeHundredthsOfInches"

# Discovery
DISCOVERY_SERVICE_TYPE = "_uscan._tcp.local."
DISCOVERY_TIMEOUT = 5
TXT_RESOURCE_PATH = "rs"
TXT_NAME = "ty"
