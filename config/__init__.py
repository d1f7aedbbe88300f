"""config — Validated configuration for the OpenShift monitoring checks."""
