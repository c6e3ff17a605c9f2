"""
JWE token implementation.

Tokens are compact JWE strings:
    - Content encryption: AES-GCM (256)
    - Key management: RSA-OAEP-SHA256
"""

from .keyholder import JWEEncrypter, KeyPair, RSAKeyHolder
from .manager import JWETokenManager

__all__ = ["JWEEncrypter", "JWETokenManager", "KeyPair", "RSAKeyHolder"]
