"""
Constants and configuration values used across the clbox codebase.
"""

# Docker configuration
DEFAULT_IMAGE = "consensys/teku:latest"
DEFAULT_NETWORK_NAME = "clbox-enclave"
DEFAULT_NETWORK_SUBNET = "172.28.0.0/16"
DEFAULT_DATA_ROOT = "./data"

# Container labels
LABEL_SERVICE = "clbox.service"
LABEL_SERVICE_ID = "service.id"
LABEL_CLIENT_TYPE = "client.type"

# Paths inside the consensus client container
CONSENSUS_DATA_DIRPATH_ON_SERVICE = "/consensus-data"
SHARED_DIRPATH_ON_SERVICE = "/shared"
SHARED_DIRNAME_ON_HOST = "shared"

# Relative paths of the provisioned genesis artifacts inside the shared dir
GENESIS_CONFIG_YML_REL_FILEPATH = "genesis-config.yml"
GENESIS_SSZ_REL_FILEPATH = "genesis.ssz"

# Network ports
DISCOVERY_PORT = 9000
HTTP_PORT = 4000

# Port IDs
TCP_DISCOVERY_PORT_ID = "tcp-discovery"
UDP_DISCOVERY_PORT_ID = "udp-discovery"
HTTP_PORT_ID = "http"

# Beacon node REST API endpoints
NODE_HEALTH_ENDPOINT = "/eth/v1/node/health"
NODE_IDENTITY_ENDPOINT = "/eth/v1/node/identity"

# Health check retry configuration
HEALTH_CHECK_ATTEMPTS = 10
HEALTH_CHECK_DELAY = 1.0  # seconds
HEALTH_CHECK_BACKOFF = 1.0  # fixed delay between probes

# REST client
DEFAULT_REST_TIMEOUT = 10.0  # seconds

# Process and container management timeouts
CONTAINER_STOP_TIMEOUT = 10  # seconds

# Launcher config file
CONFIG_FILE_SECTION = "launcher"
ENV_PREFIX = "CLBOX_"

# Response field names (from beacon API responses)
FIELD_DATA = "data"
FIELD_PEER_ID = "peer_id"
FIELD_ENR = "enr"
FIELD_P2P_ADDRESSES = "p2p_addresses"
FIELD_DISCOVERY_ADDRESSES = "discovery_addresses"
FIELD_METADATA = "metadata"

# Error messages
ERROR_FILE_NOT_FOUND = "File not found: {path}"
