class InvalidCredentialsException(Exception):
    pass

class InactiveUserException(Exception):
    pass
