import os
import dj_database_url


class EnvHandler:
    """
    Fetches environment variables with casting and a clear error when a
    required one is missing.
    """

    def get(self, variable_name, default=None, cast_to=str):
        value = os.environ.get(variable_name, default)

        # Required variable (no default) that is not set
        if value is None:
            raise ValueError(
                f"Critical setting '{variable_name}' is not set in the environment!"
            )

        if cast_to == bool:
            return str(value).lower() in ["true", "1", "t", "yes"]

        try:
            return cast_to(value)
        except (ValueError, TypeError):
            raise TypeError(
                f"Could not cast environment variable '{variable_name}' to {cast_to.__name__}."
            )

    def list(self, variable_name, default=None, separator=","):
        """Comma separated variable as a list of stripped, non-empty items."""
        raw = self.get(variable_name, default=default, cast_to=str)
        return [item.strip() for item in raw.split(separator) if item.strip()]

    def db(self, variable_name="DATABASE_URL", default=None):
        """
        Parse a database URL from the environment into a Django DATABASES entry.
        """
        db_url_string = self.get(variable_name, default=default, cast_to=str)

        return dj_database_url.parse(
            db_url_string,
            conn_max_age=600,
            conn_health_checks=True,
        )


env = EnvHandler()
