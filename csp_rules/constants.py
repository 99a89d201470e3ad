"""Saved object types and package identifiers shared across the service."""

CSP_RULE_SAVED_OBJECT_TYPE = "csp-rule"
CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE = "csp-rule-template"

CLOUD_SECURITY_POSTURE_PACKAGE_NAME = "cloud_security_posture"

# Input type used when no single benchmark input is enabled
CLOUDBEAT_VANILLA = "cloudbeat/cis_k8s"

INPUT_TYPE_SEPARATOR = "/"
