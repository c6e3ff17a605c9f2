"""
Manutara - Cluster Credential Service

Issues, encrypts, validates and refreshes short-lived access tokens for
the Manutara front-end and keeps the encryption key synchronized with a
Kubernetes secret.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- All communication through defined interfaces

Modules:
- auth: Login orchestration, JWE token lifecycle, key holder
- sync: Poll-based watch over a Kubernetes secret
- kube: Cluster API capability (secret reads, access checks)
- api: HTTP login boundary
"""

__version__ = "1.0.0"
