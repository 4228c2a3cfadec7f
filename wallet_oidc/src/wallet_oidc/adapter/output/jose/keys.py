"""JWK loading shared by the joserfc adapters"""

from typing import Any, Dict, Union

from joserfc.jwk import ECKey, OKPKey, RSAKey

JoseKey = Union[ECKey, RSAKey, OKPKey]


def load_key(jwk_dict: Dict[str, Any]) -> JoseKey:
    """
    Load a key from JWK dictionary.

    Raises:
        ValueError: If key type is not supported
    """
    kty = jwk_dict.get("kty")

    if kty == "EC":
        return ECKey.import_key(jwk_dict)
    elif kty == "RSA":
        return RSAKey.import_key(jwk_dict)
    elif kty == "OKP":
        return OKPKey.import_key(jwk_dict)
    else:
        raise ValueError(f"Unsupported key type: {kty}")


def generate_key(key_type: str = "EC", curve: str = "P-256") -> JoseKey:
    """Generate a private key (EC, RSA or OKP)"""
    if key_type == "EC":
        return ECKey.generate_key(curve, private=True)
    elif key_type == "RSA":
        return RSAKey.generate_key(2048, private=True)
    elif key_type == "OKP":
        return OKPKey.generate_key(curve or "Ed25519", private=True)
    else:
        raise ValueError(f"Unsupported key type: {key_type}")
