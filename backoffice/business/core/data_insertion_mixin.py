"""
Generic data insertion mixin for SQLAlchemy models

Provides from_dict and column_values so the SQL store can build rows from
validated field mappings and read them back without hand-listing columns.
"""

from sqlalchemy import inspect


class DataInsertionMixin:
    """
    Mixin that provides generic data insertion capabilities for SQLAlchemy models

    This mixin adds:
    - from_dict(): Create model instance from dictionary, ignoring unknown keys
    - column_values(): Plain dict of column values (datetimes left as datetimes)
    - apply_dict(): Assign a partial update onto an existing row
    """

    @classmethod
    def column_names(cls):
        return {c.key for c in inspect(cls).columns}

    @classmethod
    def from_dict(cls, data_dict, skip_fields=None):
        """
        Create a model instance from a dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            skip_fields (list, optional): Fields to skip during creation

        Returns:
            Model instance (not added to the session)
        """
        skip_fields = set(skip_fields or ())
        columns = cls.column_names()

        filtered_data = {}
        for key, value in data_dict.items():
            if key not in columns or key in skip_fields:
                continue
            if key == 'created_at' and value is None:
                # Let the column default fill it
                continue
            filtered_data[key] = value

        return cls(**filtered_data)

    def apply_dict(self, data_dict):
        """
        Assign the given columns onto this row

        Raises:
            KeyError: If a key is not a column of the model
        """
        columns = self.column_names()
        for key, value in data_dict.items():
            if key not in columns:
                raise KeyError(f"{self.__class__.__name__} has no column '{key}'")
            setattr(self, key, value)
        return self

    def column_values(self, exclude=None):
        exclude = set(exclude or ())
        return {
            column.key: getattr(self, column.key)
            for column in inspect(self.__class__).columns
            if column.key not in exclude
        }
