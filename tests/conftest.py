import sys, os, pytest, pytest_asyncio, httpx
from httpx import ASGITransport

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from main import create_app
from utils.environment import Environment
from utils.flat_storage import FlatStorageProvider, MemoryStore
from utils.qr_engine import GenerationEngine
from utils.qr_schema import GenerationRequest, GenerationResult, QRCodeRecord, RecordMetadata
from utils.qr_strategies import failure_result, success_result
from utils.sql_storage import SQLStorageProvider
from utils.storage_factory import StorageFactory


# ---------------------------------------------------------------------------
# 🧪 Fake-Strategie für Engine- und API-Tests
# ---------------------------------------------------------------------------
class FakeStrategy:
    def __init__(self, name, priority, available=True, succeed=True, raises=False, calls=None):
        self.name = name
        self.priority = priority
        self.available = available
        self.succeed = succeed
        self.raises = raises
        self.calls = calls if calls is not None else []

    async def is_available(self) -> bool:
        self.calls.append(("is_available", self.name))
        if self.raises:
            raise RuntimeError(f"{self.name} exploded")
        return self.available

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        self.calls.append(("generate", self.name))
        if self.succeed:
            return success_result(self.name, f"https://img.test/{self.name}", request)
        return failure_result(f"{self.name} failed")


def make_record(index: int, **overrides) -> QRCodeRecord:
    """Erzeugt einen Datensatz; created_at steigt mit dem Index."""
    metadata = {"size": 400, "error_correction_level": "M", "name": f"QR {index}"}
    metadata.update(overrides.pop("metadata", {}))
    data = {
        "id": f"qr-{index}",
        "content": f"https://example.com/{index}",
        "content_type": "url",
        "data_url": f"https://img.test/{index}.png",
        "created_at": 1_000 + index,
        "updated_at": 1_000 + index,
        "metadata": RecordMetadata(**metadata),
    }
    data.update(overrides)
    return QRCodeRecord(**data)


@pytest.fixture(params=["sql", "flat"])
def storage(request):
    """Beide Speicher-Implementierungen müssen sich identisch verhalten."""
    if request.param == "sql":
        provider = SQLStorageProvider("sqlite://")
        yield provider
        provider.engine.dispose()
    else:
        yield FlatStorageProvider(MemoryStore())


@pytest.fixture
def fake_engine():
    return GenerationEngine([FakeStrategy("fake", 1)])


@pytest_asyncio.fixture
async def client(fake_engine):
    """Testclient mit Fake-Engine und In-Memory-Speicher."""
    environment = Environment(structured_store=False, network=False)
    app = create_app(
        environment=environment,
        generation_engine=fake_engine,
        storage_factory=StorageFactory(environment, flat_store=MemoryStore()),
    )
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
