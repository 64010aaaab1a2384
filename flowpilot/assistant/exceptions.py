"""
Assistant Exceptions - Mapped to HTTP responses in flowpilot.main
"""

class AssistantError(Exception):
    """Bad input or unusable model output (400)"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class GenerationError(Exception):
    """The text generation backend failed or returned nothing (502)"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
