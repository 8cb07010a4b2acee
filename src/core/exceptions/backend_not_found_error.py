class BackendNotFoundError(Exception):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Backend '{name}' is not monitored")
