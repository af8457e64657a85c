"""Contact class for people responsible for a site."""


class Contact:
    """A contact person at a site."""

    def __init__(self, id: str, name: str, role: str = "", phone: str = "", email: str = ""):
        self.id = str(id)
        self.name = name
        self.role = role
        self.phone = phone
        self.email = email
