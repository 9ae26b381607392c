"""
Шифрование секретов учётных записей (AES-256-GCM, ключ из мастер-пароля через PBKDF2).

В БД секрет хранится одной строкой: base64(salt | nonce | ciphertext).
"""
import base64
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from backend.core.config import settings

SALT_SIZE = 16
NONCE_SIZE = 12  # recommended for GCM


def _derive_key(master_password: str, salt: bytes, iterations: int) -> bytes:
    if not master_password:
        raise ValueError("master_password пустой")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,  # 256-bit
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(master_password.encode("utf-8"))


def encrypt_secret(
    master_password: str, plaintext: str, iterations: int = 200_000
) -> tuple[bytes, bytes, bytes]:
    """
    Шифрует secret AES-256-GCM.
    Возвращает (salt, nonce, ciphertext).
    """
    salt = os.urandom(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    key = _derive_key(master_password, salt, iterations)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), associated_data=None)
    return salt, nonce, ciphertext


def decrypt_secret(
    master_password: str, salt: bytes, nonce: bytes, ciphertext: bytes, iterations: int = 200_000
) -> str:
    key = _derive_key(master_password, salt, iterations)
    plaintext = AESGCM(key).decrypt(nonce, ciphertext, associated_data=None)
    return plaintext.decode("utf-8")


def seal(plaintext: str) -> str:
    """Шифрует секрет ключом сервиса и упаковывает в строку для хранения."""
    salt, nonce, ciphertext = encrypt_secret(
        settings.secrets_master_key, plaintext, settings.secrets_kdf_iterations
    )
    return base64.b64encode(salt + nonce + ciphertext).decode("ascii")


def unseal(token: str) -> str:
    """
    Обратная операция к seal. Повреждённые данные -> cryptography.exceptions.InvalidTag.
    API секреты не отдаёт; функция нужна для сверки сохранённых значений.
    """
    raw = base64.b64decode(token)
    salt = raw[:SALT_SIZE]
    nonce = raw[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
    ciphertext = raw[SALT_SIZE + NONCE_SIZE:]
    return decrypt_secret(
        settings.secrets_master_key, salt, nonce, ciphertext, settings.secrets_kdf_iterations
    )
