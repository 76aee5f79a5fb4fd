"""Constants for the ClusterExternalSecret Operator."""

# API Group
API_GROUP = "external-secrets.io"
API_VERSION = "v1beta1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_CLUSTER_EXTERNAL_SECRET = "ClusterExternalSecret"
KIND_EXTERNAL_SECRET = "ExternalSecret"

# Plurals
PLURAL_CLUSTER_EXTERNAL_SECRETS = "clusterexternalsecrets"
PLURAL_EXTERNAL_SECRETS = "externalsecrets"

# Controller identity
CONTROLLER_NAME = "cluster-external-secret-operator"
FIELD_MANAGER = CONTROLLER_NAME

# Fan-out listing
PARENT_LIST_PAGE_SIZE = 100

# Metadata-only reads
PARTIAL_OBJECT_METADATA_ACCEPT = "application/json;as=PartialObjectMetadata;g=meta.k8s.io;v=v1"

# Condition Types
COND_READY = "Ready"
COND_PARTIALLY_READY = "PartiallyReady"
COND_NOT_READY = "NotReady"

# Error messages
ERR_GET_CES = "could not get ClusterExternalSecret"
ERR_PATCH_STATUS = "unable to patch status"
ERR_CONVERT_LABEL_SELECTOR = "unable to convert labelselector"
ERR_NAMESPACES = "could not get namespaces from selector"
ERR_REFRESH_INTERVAL = "unable to parse refreshInterval"
ERR_GET_EXISTING_ES = "could not get existing ExternalSecret"
ERR_CREATING_OR_UPDATING = "could not create or update ExternalSecret"
ERR_SET_CTRL_REFERENCE = "could not set the controller owner reference"
ERR_SECRET_ALREADY_EXISTS = "external secret already exists in namespace"
ERR_NAMESPACES_FAILED = "one or more namespaces failed"
ERR_FAILED_TO_DELETE = "could not delete external secret in non matching namespace"
ERR_DELETE_EXTERNAL_SECRET = "unable to delete external-secret"

MSG_ALL_SYNCHRONIZED = "all namespaces synchronized"

# Event Reasons
EVENT_REASON_RECONCILED = "Reconciled"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_NAMESPACE_FAILED = "NamespaceFailed"
