"""
Tests for the `params` module.
"""


import pytest
from faker import Faker

from bucket_stream import params


def test_pick(faker: Faker) -> None:
    """
    Tests that `pick` keeps exactly the allowed parameters.

    Args:
        faker: The fixture to use for generating fake data.

    """
    # Arrange.
    bag = faker.pydict(
        nb_elements=10, variable_nb_elements=False, value_types=[str, int]
    )
    allowed = list(bag.keys())[:4] + [faker.uuid4()]

    # Act.
    got_picked = params.pick(bag, allowed)

    # Assert.
    # It should have kept the intersection, with the same values.
    assert set(got_picked.keys()) == set(bag.keys()) & set(allowed)
    for key, value in got_picked.items():
        assert value is bag[key]
    # It should have preserved the ordering of the input.
    assert list(got_picked.keys()) == [k for k in bag if k in allowed]
    # It should not have modified the input.
    assert len(bag) == 10


def test_pick_empty(faker: Faker) -> None:
    """
    Tests that `pick` works when nothing is allowed.

    Args:
        faker: The fixture to use for generating fake data.

    """
    # Arrange.
    bag = faker.pydict(nb_elements=5, variable_nb_elements=False)

    # Act and assert.
    assert params.pick(bag, []) == {}
    assert params.pick({}, ["Bucket"]) == {}


def test_pick_params_delete_object(faker: Faker) -> None:
    """
    Tests that `pick_params` uses the correct whitelist for deletions.

    Args:
        faker: The fixture to use for generating fake data.

    """
    # Arrange.
    bag = dict(
        Bucket=faker.bucket_name(),
        Key=faker.file_name(),
        VersionId=faker.uuid4(),
        MFA=faker.pystr(),
        Body=faker.binary(length=16),
        ETag=faker.md5(),
        Size=faker.random_int(),
    )

    # Act.
    got_picked = params.pick_params(params.Operation.DELETE_OBJECT, bag)

    # Assert.
    assert got_picked == dict(
        Bucket=bag["Bucket"],
        Key=bag["Key"],
        VersionId=bag["VersionId"],
        MFA=bag["MFA"],
    )


def test_pick_params_put_object(faker: Faker) -> None:
    """
    Tests that `pick_params` uses the correct whitelist for uploads.

    Args:
        faker: The fixture to use for generating fake data.

    """
    # Arrange.
    bag = dict(
        Bucket=faker.bucket_name(),
        Key=faker.file_name(),
        Body=faker.binary(length=16),
        ContentType=faker.mime_type(),
        Metadata=dict(author=faker.name()),
        ServerSideEncryption="AES256",
        LastModified=faker.date_time(),
        Size=faker.random_int(),
    )

    # Act.
    got_picked = params.pick_params(params.Operation.PUT_OBJECT, bag)

    # Assert.
    # Listing metadata should be removed.
    expected = dict(bag)
    expected.pop("LastModified")
    expected.pop("Size")
    assert got_picked == expected


@pytest.mark.parametrize("operation", params.Operation)
def test_every_operation_has_whitelist(operation: params.Operation) -> None:
    """
    Tests that there is a whitelist for every operation.

    Args:
        operation: The operation to check.

    """
    # Assert.
    assert operation in params.ALLOWED_PARAMS
