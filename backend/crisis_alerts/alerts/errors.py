"""Alert workflow errors. Each carries the notification text shown to the operator."""


class AlertError(Exception):
    """Base class for failures of one alert submission."""

    code = "ALERT_ERROR"
    title = "Alert failed"

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description


class AlertValidationError(AlertError):
    """A precondition failed; no dispatch call was made."""


class OfflineError(AlertValidationError):
    code = "OFFLINE"
    title = "You're offline"

    def __init__(self):
        super().__init__("Cannot send alerts while offline. Please check your connection.")


class InvalidEmailError(AlertValidationError):
    code = "INVALID_EMAIL"
    title = "Invalid email"

    def __init__(self):
        super().__init__("Please enter a valid email address")


class MissingContentError(AlertValidationError):
    code = "MISSING_CONTENT"
    title = "Missing information"

    def __init__(self):
        super().__init__("Please provide both subject and message for the alert")


class NoPhoneNumbersError(AlertValidationError):
    code = "NO_PHONE_NUMBERS"
    title = "No phone numbers"

    def __init__(self):
        super().__init__("Please add at least one phone number to send SMS alerts")


class InvalidPhoneError(AlertValidationError):
    code = "INVALID_PHONE"
    title = "Invalid phone numbers"

    def __init__(self, count: int):
        noun = "number" if count == 1 else "numbers"
        super().__init__(f"Please correct {count} invalid phone {noun}")
        self.count = count


class AlertInFlightError(AlertError):
    code = "IN_FLIGHT"
    title = "Alert already sending"

    def __init__(self):
        super().__init__("Please wait for the current alert to finish sending")


class DispatchTransportError(AlertError):
    code = "DISPATCH_TRANSPORT"
    title = "Failed to send alerts"

    def __init__(self, message: str | None = None):
        if message:
            description = f"Failed to send alerts: {message}"
        else:
            description = "An unknown error occurred"
        super().__init__(description)
        self.message = message
