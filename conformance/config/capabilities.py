"""
Capability and Collaborator Keys

Catalogue of the keys a configuration snapshot may hold: the optional
behaviours an implementation claims to support, and one slot per
collaborator referenced by a test.
"""

from enum import Enum

TOLERANCE = 1E-10
ANGULAR_TOLERANCE = 1E-7


class ConfigKey(Enum):
    """Well-known configuration snapshot keys."""

    # Capability flags
    STANDARD_IDENTIFIER_SUPPORTED = "isStandardIdentifierSupported"
    STANDARD_NAME_SUPPORTED = "isStandardNameSupported"
    STANDARD_ALIAS_SUPPORTED = "isStandardAliasSupported"
    DEPENDENCY_IDENTIFICATION_SUPPORTED = "isDependencyIdentificationSupported"
    DEPRECATED_OBJECT_CREATION_SUPPORTED = "isDeprecatedObjectCreationSupported"
    PRESERVES_USER_VALUES = "isFactoryPreservingUserValues"

    # Shared collaborators
    UNITS = "units"
    VALIDATORS = "validators"

    # Factories under test
    DATUM_FACTORY = "datumFactory"
    CS_FACTORY = "csFactory"
    CRS_FACTORY = "crsFactory"
    COP_FACTORY = "copFactory"
    MT_FACTORY = "mtFactory"
    DATUM_AUTHORITY_FACTORY = "datumAuthorityFactory"
    CS_AUTHORITY_FACTORY = "csAuthorityFactory"
    CRS_AUTHORITY_FACTORY = "crsAuthorityFactory"
    COP_AUTHORITY_FACTORY = "copAuthorityFactory"

    @property
    def is_capability(self) -> bool:
        return self in CAPABILITY_KEYS

    @classmethod
    def from_name(cls, name: str) -> 'ConfigKey':
        """
        Resolve a key from its published name or its member name.

        Raises:
            KeyError: If no key has that name
        """
        for key in cls:
            if name in (key.value, key.name, key.name.lower()):
                return key
        raise KeyError(name)


CAPABILITY_KEYS = (
    ConfigKey.STANDARD_IDENTIFIER_SUPPORTED,
    ConfigKey.STANDARD_NAME_SUPPORTED,
    ConfigKey.STANDARD_ALIAS_SUPPORTED,
    ConfigKey.DEPENDENCY_IDENTIFICATION_SUPPORTED,
    ConfigKey.DEPRECATED_OBJECT_CREATION_SUPPORTED,
    ConfigKey.PRESERVES_USER_VALUES,
)
