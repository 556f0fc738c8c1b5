"""Constants for the IRSA Operator."""

# API Group
API_GROUP = "irsa.cloud37.dev"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_SETUP = "IRSASetup"
KIND_BINDING = "IRSA"

# Setup modes
MODE_SELFHOSTED = "selfhosted"
MODE_EKS = "eks"

# Finalizers
FINALIZER = f"{API_GROUP}/finalizer"

# Field Manager
FIELD_MANAGER = "irsa-operator"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"

# Annotations
ANNOTATION_ROLE_ARN = "eks.amazonaws.com/role-arn"

# Key material secret
KEY_SECRET_NAME = "irsa-manager-key"
KEY_SECRET_NAMESPACE = "kube-system"
KEY_SECRET_TYPE = "kubernetes.io/ssh-auth"
KEY_SECRET_PUBLIC_KEY = "ssh-publickey"
KEY_SECRET_PRIVATE_KEY = "ssh-privatekey"

# OIDC discovery documents
JWKS_FILE_NAME = "keys.json"
DISCOVERY_FILE_NAME = ".well-known/openid-configuration"
OIDC_CLIENT_ID = "sts.amazonaws.com"
OIDC_PLACEHOLDER_THUMBPRINT = "x" * 40

# Condition Types
COND_READY = "Ready"

# Condition Reasons (shared)
REASON_INVALID_SPEC = "InvalidSpec"

# Condition Reasons (Setup)
REASON_SELFHOSTED_READY = "SelfHostedSetupReady"
REASON_FAILED_KEYS = "SelfHostedSetupFailedKeysCreation"
REASON_FAILED_OIDC = "SelfHostedSetupFailedOidcCreation"
REASON_FAILED_WEBHOOK = "SelfHostedSetupFailedWebhookCreation"
REASON_FAILED_ISSUER = "SelfHostedSetupFailedIssuer"
REASON_EKS_READY = "EksReady"
REASON_EKS_NOT_READY = "EksNotReady"

# Condition Reasons (Binding)
REASON_IRSA_READY = "IRSAReady"
REASON_IRSA_FAILED_SETUP = "IRSAFailedSetupLookup"
REASON_IRSA_FAILED_ACCOUNT_ID = "IRSAFailedAccountId"
REASON_IRSA_FAILED_ROLE_UPDATE = "IRSAFailedRoleUpdate"
REASON_IRSA_FAILED_APPLYING = "IRSAFailedApplyingResources"
REASON_IRSA_FAILED_DELETING = "IRSAFailedDeletingResources"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_SUCCEEDED = "ValidateSucceeded"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_SETUP_READY = "SetupReady"
EVENT_REASON_ROLE_SYNCED = "RoleSynced"
EVENT_REASON_SERVICE_ACCOUNTS_APPLIED = "ServiceAccountsApplied"
EVENT_REASON_SERVICE_ACCOUNTS_DELETED = "ServiceAccountsDeleted"
EVENT_REASON_CLEANUP_SUCCEEDED = "CleanupSucceeded"

# Pod identity webhook
WEBHOOK_NAME = "pod-identity-webhook"
WEBHOOK_NAMESPACE = "kube-system"
WEBHOOK_DEFAULT_IMAGE = "quay.io/amis/pod-identity-webhook:v0.0.1"
