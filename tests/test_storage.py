import pytest

from solid_authn.models.errors import StorageError
from solid_authn.storage import InMemoryStorage


class TestInMemoryStorage:
    def setup_method(self):
        # Arrange
        self.storage = InMemoryStorage()

    async def test_set_for_user_merges_fields(self):
        # Act
        await self.storage.set_for_user("s1", {"codeVerifier": "v1", "dpop": "true"})
        await self.storage.set_for_user("s1", {"codeVerifier": "v2"})

        # Assert
        assert await self.storage.get_all_for_user("s1") == {
            "codeVerifier": "v2",
            "dpop": "true",
        }

    async def test_user_records_are_prefixed(self):
        await self.storage.set_for_user("s1", {"sessionId": "s1"})

        assert await self.storage.get("s1") is None
        assert await self.storage.get("solidClientAuthenticationUser:s1") is not None

    async def test_get_for_user_missing_values(self):
        assert await self.storage.get_for_user("unknown", "sessionId") is None

    async def test_delete_for_user_removes_one_field(self):
        # Arrange
        await self.storage.set_for_user("s1", {"codeVerifier": "v", "dpop": "true"})

        # Act
        await self.storage.delete_for_user("s1", "codeVerifier")

        # Assert
        assert await self.storage.get_all_for_user("s1") == {"dpop": "true"}

    async def test_delete_all_user_data(self):
        # Arrange
        await self.storage.set_for_user("s1", {"codeVerifier": "v"})

        # Act
        await self.storage.delete_all_user_data("s1")

        # Assert
        assert await self.storage.get_all_for_user("s1") == {}

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]"])
    async def test_corrupt_record_raises_storage_error(self, raw):
        # Arrange
        await self.storage.set("solidClientAuthenticationUser:s1", raw)

        # Act & Assert
        with pytest.raises(StorageError, match="Corrupt record"):
            await self.storage.get_for_user("s1", "codeVerifier")

    async def test_custom_prefix(self):
        storage = InMemoryStorage(prefix="myapp")

        await storage.set_for_user("s1", {"dpop": "false"})

        assert await storage.get("myapp:s1") == '{"dpop": "false"}'
