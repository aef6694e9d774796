import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///patio.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # sql | firestore | memory
    STORE_BACKEND = os.getenv("STORE_BACKEND", "sql")
    VEHICLES_COLLECTION = os.getenv("VEHICLES_COLLECTION", "vehicles")

    FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
    FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL")
    FIREBASE_PRIVATE_KEY = os.getenv("FIREBASE_PRIVATE_KEY")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Sessões de operador mantidas em memória (rascunho + lista carregada)
    OPERATOR_SESSIONS_MAX = int(os.getenv("OPERATOR_SESSIONS_MAX", "256"))
    OPERATOR_SESSION_TTL = int(os.getenv("OPERATOR_SESSION_TTL", str(8 * 60 * 60)))

# Primeiro número de registro quando a coleção está vazia.
# Mantém a continuidade com a numeração em papel anterior ao sistema.
REGISTRATION_SEED = 1202890

# Valor do filtro de cidade que significa "todas as cidades"
CITY_ALL = "all"
