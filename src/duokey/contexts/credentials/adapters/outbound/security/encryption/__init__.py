from .aes_ctr_secret_encryptor import AesCtrSecretEncryptor

__all__ = ["AesCtrSecretEncryptor"]
