"""
Email dispatch client interface (Port).

Defines the contract for sending templated transactional email.
The infrastructure layer will provide the adapter implementation.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class EmailTemplate(Enum):
    """Logical email templates and their fixed subject lines."""

    USER_VERIFICATION = ("user_verification", "User Verification Successful")
    USER_LOGIN = ("user_login", "User Login Successful")

    def __init__(self, template_id: str, subject: str):
        self.template_id = template_id
        self.subject = subject


class EmailDispatchClient(ABC):
    """
    Abstract interface for email sending.

    This is a "port" in Hexagonal Architecture.

    Decision: Classifying failures is part of this contract. Implementations
    must raise SendError with kind TRANSIENT or PERMANENT, because the
    dispatcher acknowledges or redelivers based on that kind alone.
    """

    @abstractmethod
    async def send(self, template: EmailTemplate, to: str, variables: dict[str, Any]) -> None:
        """
        Render a template and hand the message to the mail transport.

        Args:
            template: Which template to render
            to: Recipient address
            variables: Template variables

        Raises:
            SendError: TRANSIENT or PERMANENT
        """
        pass
