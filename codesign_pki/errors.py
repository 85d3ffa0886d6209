class CertificateLoadError(Exception):
    prefix = ""

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.prefix + self.message


class MissingFiles(CertificateLoadError):
    pass


class InvalidPEM(CertificateLoadError):
    prefix = "Invalid PEM: "


class InvalidDER(CertificateLoadError):
    prefix = "Invalid DER: "


class CommandFailed(Exception):
    def __str__(self):
        return "Command failed: " + self.args[0]
