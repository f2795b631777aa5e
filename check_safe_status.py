#!/usr/bin/env python3
"""
Check Safe status - derived address, deployment data and relayer deployment status.
"""
import asyncio
import logging

from dotenv import load_dotenv

# Load environment variables before importing settings
load_dotenv()

from polyrelay.config import settings
from polyrelay.core.errors import RelayerClientError
from polyrelay.core.polymarket import RelayClient
from polyrelay.core.wallet import get_deployment_data

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


async def main():
    print("=" * 80)
    print("SAFE WALLET STATUS")
    print("=" * 80)
    print()

    if not settings.private_key:
        print("❌ PRIVATE_KEY is not set")
        return

    async with RelayClient() as client:
        owner = client.signer.address
        safe_address = client.get_expected_safe()

        print(f"🔗 Chain: {client.chain_id}")
        print(f"👤 Owner: {owner}")
        print(f"📬 Safe:  {safe_address}")
        print()

        data = get_deployment_data(owner, client.chain_id, client.registry)
        print(f"🏭 Factory:          {data['factory']}")
        print(f"🧩 Singleton:        {data['singleton']}")
        print(f"↩️  Fallback handler: {data['fallbackHandler']}")
        print()

        try:
            deployed = await client.get_deployed(safe_address)
        except RelayerClientError as e:
            print(f"⚠️  Could not check deployment via relayer: {e}")
            return

        if deployed:
            print("✅ Safe is deployed")
        else:
            print("⏳ Safe is not deployed yet")
            if not client.is_configured():
                print("   Builder credentials are missing, deployment via relayer is unavailable")


if __name__ == "__main__":
    asyncio.run(main())
