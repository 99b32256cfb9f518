# User-facing strings shown by the client controllers.

CAMERA_INSECURE = "Camera requires HTTPS or localhost. Please use https:// or run locally."
CAMERA_DENIED = "Camera permissions denied. Please allow camera access in your system settings."
CAMERA_UNAVAILABLE = "Unable to start camera. Please allow camera access or try manual entry."

MISSING_UPC = "Enter or scan a UPC first."
BARCODE_NOT_FOUND = "Barcode not found"
LOOKUP_FAILED = "Lookup failed. Please try again."

REQUIRED_FIELD = "{field} is required"
INLINE_UPDATE_FAILED = "Failed to update item. Please try again."
CONFIRM_DELETE = "Are you sure you want to delete {name}?"
