from typing import Literal, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from orgtree.core.directory.layout import DirectoryLayout, ObjectClasses


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    app_name: str = Field(default="OrgTree", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment mode"
    )

    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    api_prefix: str = Field(default="/api/v1", description="API prefix")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )

    cors_allow_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )

    # Directory connection settings
    directory_backend: Literal["ldap", "memory"] = Field(
        default="ldap", description="Directory store implementation"
    )
    ldap_host: str = Field(default="localhost", description="LDAP server host")
    ldap_port: int = Field(default=389, description="LDAP server port")
    ldap_use_ssl: bool = Field(default=False, description="Use LDAPS")
    ldap_bind_dn: str = Field(
        default="cn=admin,o=sreemat", description="DN used to bind to the directory"
    )
    ldap_bind_password: str = Field(default="", description="Bind password")
    ldap_connect_timeout: int = Field(
        default=10, description="Connection timeout in seconds"
    )
    ldap_receive_timeout: int = Field(
        default=30, description="Receive timeout in seconds"
    )

    # Directory layout settings
    base_dn: str = Field(default="o=sreemat", description="Directory suffix")
    groups_container_name: str = Field(
        default="groups", description="Name of the container holding groups"
    )
    domain_admin_cn: str = Field(
        default="DomainAdministrator", description="Organization administrator group name"
    )
    group_admin_cn: str = Field(
        default="GroupAdministrator", description="Group administrator subgroup name"
    )
    super_admin_cn: str = Field(
        default="SuperAdministrators", description="Branch super-administrator group name"
    )
    organizational_unit_class: str = Field(
        default="organizationalUnit", description="Object class of organizations"
    )
    group_class: str = Field(
        default="groupOfNames", description="Object class of groups"
    )
    member_attribute: str = Field(
        default="member", description="Group membership attribute"
    )
    bootstrap_super_admin: Optional[str] = Field(
        default=None,
        description="If set, both branches are bootstrapped at startup with this super administrator",
    )

    # Observability settings
    metrics_enabled: bool = Field(default=True, description="Enable metrics endpoint")

    @field_validator("log_format", mode="after")
    @classmethod
    def validate_log_format(cls, v, info: ValidationInfo):
        if info.data.get("environment") == "production":
            return "json"
        return v

    @field_validator(
        "base_dn", "groups_container_name", "domain_admin_cn",
        "group_admin_cn", "super_admin_cn", mode="after"
    )
    @classmethod
    def validate_not_blank(cls, v: str, info: ValidationInfo):
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v.strip()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def directory_layout(self) -> DirectoryLayout:
        return DirectoryLayout(
            base_dn=self.base_dn,
            groups_container_name=self.groups_container_name,
            domain_admin_cn=self.domain_admin_cn,
            group_admin_cn=self.group_admin_cn,
            super_admin_cn=self.super_admin_cn,
            object_classes=ObjectClasses(
                organizational_unit=self.organizational_unit_class,
                group=self.group_class,
            ),
            member_attribute=self.member_attribute,
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


settings = get_settings()
