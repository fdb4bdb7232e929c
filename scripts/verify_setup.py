"""Verify that the setup is correct before running the listing service."""
import asyncio
import sys
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from registry_lister.config import ListerConfig
from registry_lister.domain.errors import RegistryError, TransportError
from registry_lister.infrastructure.registry_client import RegistryHttpClient
from registry_lister.infrastructure.token_providers import token_provider_from_config


def check_configuration():
    """Check that configuration parses and is usable."""
    print("Checking configuration...")

    try:
        config = ListerConfig.from_env()
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}")
        return False

    print("✅ Configuration loaded")
    print(f"   REGISTRY_HOST: {config.registry_host}")
    print(f"   REFRESH_INTERVAL: {config.refresh_interval:g}s")
    if config.public_prefixes:
        print(f"   PUBLIC_PREFIXES: {', '.join(config.public_prefixes)}")
    else:
        print("⚠️  PUBLIC_PREFIXES is empty, no repositories will be listed")
    return True


def check_token_provider():
    """Check that a token source is configured."""
    print("\nChecking token provider...")

    config = ListerConfig.from_env()
    try:
        token_provider_from_config(config)
    except ValueError as e:
        print(f"❌ {e}")
        return False

    source = f"token service at {config.token_realm}" if config.token_realm else "static REGISTRY_TOKEN"
    print(f"✅ Using {source}")
    return True


@retry(
    retry=retry_if_exception_type(TransportError),
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True
)
async def _ping_registry(client: RegistryHttpClient) -> bool:
    return await client.ping()


async def _probe_registry(config: ListerConfig) -> int:
    token_provider = token_provider_from_config(config)
    client = RegistryHttpClient(config.registry_host, token_provider, timeout=config.request_timeout)
    try:
        await _ping_registry(client)
        catalog = await client.fetch_catalog()
        return len(catalog)
    finally:
        await client.close()
        await token_provider.close()


def check_registry_connection():
    """Check that the registry answers and the catalog is readable."""
    print("\nChecking registry connection...")

    config = ListerConfig.from_env()
    try:
        count = asyncio.run(_probe_registry(config))
    except (RegistryError, ValueError) as e:
        print(f"❌ Failed to read catalog from {config.registry_host}: {e}")
        return False

    print(f"✅ Successfully read catalog from {config.registry_host}")
    print(f"   Repositories in catalog: {count}")
    return True


def main():
    """Run all verification checks."""
    print("=" * 60)
    print("Registry Lister - Setup Verification")
    print("=" * 60)

    checks = [
        ("Configuration", check_configuration),
        ("Token Provider", check_token_provider),
        ("Registry Connection", check_registry_connection),
    ]

    results = {}
    for name, check_func in checks:
        try:
            results[name] = check_func()
        except Exception as e:
            print(f"❌ {name} check failed with exception: {e}")
            results[name] = False

    print("\n" + "=" * 60)
    print("Verification Summary")
    print("=" * 60)

    for name, passed in results.items():
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"{status}: {name}")

    if all(results.values()):
        print("\n✅ All checks passed! Ready to serve listings.")
        print("\nNext steps:")
        print("  python serve_listings.py")
        sys.exit(0)
    else:
        print("\n❌ Some checks failed. Please fix the issues above.")
        print("\nCommon solutions:")
        print("  - Point REGISTRY_HOST at the registry root URL")
        print("  - Set REGISTRY_TOKEN, or TOKEN_REALM with credentials")
        sys.exit(1)


if __name__ == "__main__":
    main()
