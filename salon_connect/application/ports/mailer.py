from abc import ABC, abstractmethod


class MailerPort(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, html: str, text: str) -> str:
        """Send an email. Returns the message id."""
        raise NotImplementedError
