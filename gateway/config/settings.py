from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    namespace: str = "default"
    in_cluster: bool = False
    kubeconfig: str = ""
    crd_group: str = "argoproj.io"
    crd_version: str = "v1alpha1"
    log_container: str = "main"
    s3_scheme: str = "http"
    s3_signature_version: str = "s3v4"
    ui_dist: str = ""
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8001

    class Config:
        env_file = ".env"
        env_prefix = "GATEWAY_"
