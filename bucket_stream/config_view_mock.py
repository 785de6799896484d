"""
Implements utilities for mocking Confuse `ConfigView`s.
"""


import unittest.mock as mock
from typing import Any, Dict

from confuse import ConfigView


class ConfigViewMock(mock.NonCallableMock):
    """
    Special mock for `ConfigView` instances that lets us set fake configuration.

    Examples:
        ```
        mock = ConfigViewMock()
        mock["s3"]["region_name"].as_str.return_value = "us-east-1"
        mock["s3"]["parallelism"].get.return_value = 3

        print(mock["s3"]["region_name"].as_str())
        print(mock["s3"]["parallelism"].get(int))
        ```
    """

    def __init__(self, *args: Any, **kwargs: Any):
        """
        Args:
            *args: Will be forwarded to the superclass.
            **kwargs: Will be forwarded to the superclass.
        """
        # Save arguments so that we can forward them to sub-views.
        super().__init__(spec=ConfigView, instance=True, *args, **kwargs)
        self.__args = args
        self.__kwargs = kwargs

        # Sub-views that we have created, by key.
        self.__sub_views: Dict[str, "ConfigViewMock"] = {}

    def __getitem__(self, config_key: str) -> "ConfigViewMock":
        """
        Gets a mocked sub-view for a particular configuration key. The
        particular view will be unique for each key.

        Args:
            config_key: The configuration key.

        Returns:
            The corresponding view for this key.

        """
        sub_view = self.__sub_views.get(config_key)
        if sub_view is None:
            # We have not accessed this key before. Create a new sub-view.
            sub_view = ConfigViewMock(*self.__args, **self.__kwargs)
            self.__sub_views[config_key] = sub_view

        return sub_view

    def set_values(self, values: Dict[str, Any]) -> None:
        """
        Convenience method that sets the return values of `as_str()` and
        `get()` for several keys at once.

        Args:
            values: Maps keys to the values they should produce.

        """
        for key, value in values.items():
            self[key].as_str.return_value = value
            self[key].get.return_value = value
