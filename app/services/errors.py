class ServiceError(Exception):
    message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class NotificationError(ServiceError):
    message = "Notification request failed."


class NotificationValidationError(NotificationError):
    message = "Title and message are required."


class NotificationNotFoundError(NotificationError):
    message = "Notification not found."


class NotificationPermissionError(NotificationError):
    message = "You do not have permission to delete this notification."


class NotificationUserNotFoundError(NotificationError):
    message = "User not found."


class ProfileError(ServiceError):
    message = "Profile request failed."


class ProfileValidationError(ProfileError):
    message = "Invalid profile data."


class ProfileNotFoundError(ProfileError):
    message = "User not found."


class ProfilePermissionError(ProfileError):
    message = "Only admins can change user roles."


class PaymentSettingsError(ServiceError):
    message = "Payment settings request failed."


class PaymentSettingsPermissionError(PaymentSettingsError):
    message = "Only admins can update payment settings."
