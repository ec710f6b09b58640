"""
sigtrust constants

Trust artifact names, environment variable names and RFC 6962 wire codes.
"""

# Environment overrides
ENV_ROOT_FILE = "SIGSTORE_ROOT_FILE"
ENV_CT_LOG_PUBLIC_KEY_FILE = "SIGSTORE_CT_LOG_PUBLIC_KEY_FILE"
ENV_TUF_ROOT = "TUF_ROOT"

DEFAULT_TUF_ROOT = "~/.sigstore/root"

# Trust artifact names in the distribution repository
FULCIO_TARGET = "fulcio.crt.pem"
FULCIO_V1_TARGET = "fulcio_v1.crt.pem"
CTFE_TARGET = "ctfe.pub"

# Local trust repository layout
TARGETS_METADATA_FILE = "targets.json"
TARGETS_DIR = "targets"

# RFC 6962 section 3.2
LOG_ID_SIZE = 32
SCT_VERSION_V1 = 0
SIGNATURE_TYPE_CERTIFICATE_TIMESTAMP = 0
ENTRY_TYPE_X509 = 0
ENTRY_TYPE_PRECERT = 1

# RFC 5246 section 7.4.1.4.1
HASH_ALGORITHM_SHA256 = 4
HASH_ALGORITHM_SHA384 = 5
HASH_ALGORITHM_SHA512 = 6
SIGNATURE_ALGORITHM_RSA = 1
SIGNATURE_ALGORITHM_ECDSA = 3
