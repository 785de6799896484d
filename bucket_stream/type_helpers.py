"""
Miscellaneous type aliases.
"""


from pydantic import ConfigDict

ArbitraryTypesConfig = ConfigDict(arbitrary_types_allowed=True)
"""
Pydantic configuration that allows for arbitrary types.
"""
