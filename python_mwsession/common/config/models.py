from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class ClientConfig(BaseSettings):
    base_url: Optional[str] = None
    user_agent: str = "mwsession/0.1.0 (https://www.mediawiki.org/wiki/API:Main_page)"
    timeout: float = 30.0
    format: str = "json"
    formatversion: int = 2
    servedby: Optional[bool] = None
    curtimestamp: Optional[bool] = None
    responselanginfo: Optional[bool] = None
    requestid: Optional[str] = None
    ascii: Optional[bool] = None
    utf8: Optional[bool] = None

    def default_params(self) -> dict:
        return {
            "servedby": self.servedby,
            "curtimestamp": self.curtimestamp,
            "responselanginfo": self.responselanginfo,
            "requestid": self.requestid,
            "format": self.format,
            "formatversion": self.formatversion,
            "ascii": self.ascii,
            "utf8": self.utf8,
        }

    model_config = SettingsConfigDict(env_prefix="MWSESSION_")

class LoggingConfig(BaseSettings):
    level: str = "INFO"
    format: str = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")

class AppConfig(BaseSettings):
    name: str = "mwsession"

    client: ClientConfig = ClientConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(env_file=".env", env_nested_delimiter="__")
