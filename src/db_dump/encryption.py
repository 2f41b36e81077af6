"""age encryption stage.

Encrypts the dump stream to one recipient or to every recipient listed in
a recipients file. The recipients file wins when both are given.
"""

from db_dump.compression import SpliceCallback
from db_dump.config.models import EncryptionSettings
from db_dump.errors import ConfigurationError
from db_dump.pipeline.models import Command, Stage
from db_dump.utilities import Utilities


class AgeEncryptor:
    def __init__(
        self,
        utilities: Utilities,
        recipient: str | None = None,
        recipients_file: str | None = None,
    ) -> None:
        if not (recipient or recipients_file):
            raise ConfigurationError("age encryption needs a recipient or a recipients_file")
        self.utilities = utilities
        self.recipient = recipient
        self.recipients_file = recipients_file

    @classmethod
    def from_settings(cls, settings: EncryptionSettings, utilities: Utilities) -> "AgeEncryptor":
        return cls(utilities, recipient=settings.recipient, recipients_file=settings.recipients_file)

    def encrypt_with(self, callback: SpliceCallback) -> None:
        # Both values go through the same quoting when rendered
        if self.recipients_file:
            args = ("--recipients-file", self.recipients_file)
        else:
            args = ("--recipient", self.recipient)
        command = Command(self.utilities.resolve("age"), args)
        callback(Stage(label="age", commands=(command,)), ".age")
