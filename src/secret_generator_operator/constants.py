"""
Constants used throughout the secret generator operator.

This module defines all constant values used by the operator including:
- Annotation keys forming the persisted directive surface on Secrets
- Secret type identifiers and generated field names
- Default generation parameters
- Retry timing for generation failures
"""

# Annotation prefix shared by every key the operator reads or writes
ANNOTATION_PREFIX = "secret-generator.v1.mittwald.de"

# Annotation constants for generation directives
ANNOTATION_SECRET_TYPE = f"{ANNOTATION_PREFIX}/type"
ANNOTATION_SECRET_AUTOGENERATE = f"{ANNOTATION_PREFIX}/autogenerate"
ANNOTATION_SECRET_LENGTH = f"{ANNOTATION_PREFIX}/length"
ANNOTATION_SECRET_ENCODING = f"{ANNOTATION_PREFIX}/encoding"
ANNOTATION_SECRET_TEMPLATE = f"{ANNOTATION_PREFIX}/template"
ANNOTATION_SECRET_REGENERATE = f"{ANNOTATION_PREFIX}/regenerate"
ANNOTATION_BASIC_AUTH_USERNAME = f"{ANNOTATION_PREFIX}/basic-auth-username"

# Annotations written by the operator
ANNOTATION_SECRET_SECURE = f"{ANNOTATION_PREFIX}/secure"
ANNOTATION_SECRET_AUTOGENERATED_AT = f"{ANNOTATION_PREFIX}/autogenerate-generated-at"

# Value markers
SECURE_MARKER_VALUE = "yes"
REGENERATE_ALL_VALUE = "yes"

# Length annotation suffix marking a raw byte count instead of a character count
BYTE_LENGTH_SUFFIX = "b"

# Placeholder replaced by the generated value inside a template
TEMPLATE_PLACEHOLDER = "${SECRET}"

# Supported encodings (anything else falls back to base64)
ENCODING_BASE64 = "base64"
ENCODING_BASE64_URL = "base64url"
ENCODING_BASE32 = "base32"
ENCODING_HEX = "hex"
ENCODING_RAW = "raw"

# Secret type identifiers
SECRET_TYPE_STRING = "string"
SECRET_TYPE_SSH_KEYPAIR = "ssh-keypair"
SECRET_TYPE_BASIC_AUTH = "basic-auth"

# Field names written by the SSH keypair generator
FIELD_SSH_PRIVATE_KEY = "ssh-privatekey"
FIELD_SSH_PUBLIC_KEY = "ssh-publickey"

# Field names written by the basic-auth generator
FIELD_BASIC_AUTH_INGRESS = "auth"
FIELD_BASIC_AUTH_USERNAME = "username"
FIELD_BASIC_AUTH_PASSWORD = "password"
DEFAULT_BASIC_AUTH_USERNAME = "admin"

# Default generation parameters
DEFAULT_SECRET_LENGTH = 40
DEFAULT_SECRET_ENCODING = ENCODING_BASE64
DEFAULT_SSH_KEY_LENGTH = 2048

# Delay (seconds) before retrying a pass whose value generation failed
GENERATION_RETRY_DELAY = 30

# Timestamp format for the generated-at annotation (RFC 3339, second precision)
GENERATED_AT_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Passes attempted per Secret event before a retryable failure is given up
# until the next event
GENERATION_RETRY_ATTEMPTS = 5

# Operator identity
OPERATOR_NAME = "secret-generator-operator"

# bcrypt work factor for basic-auth password hashes
BCRYPT_ROUNDS = 10

# bcrypt only considers the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72
