from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    """Application settings."""
    
    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_RELOAD: bool = True
    
    # Version and environment
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    
    # Simulation settings
    SIMULATION_TICK_SECONDS: float = 2.0
    SIMULATION_LOG_PROBABILITY: float = 0.3
    SIMULATION_SEED: Optional[int] = None
    
    # Deployment settings
    DEPLOY_STEP_SECONDS: float = 1.0
    DEPLOY_TIMEOUT_GRACE_SECONDS: float = 5.0
    
    class Config:
        env_file = ".env"

settings = Settings()
