"""Chain listing endpoint."""

from fastapi import APIRouter, Depends

from multifaucet.api.deps import get_chain_registry, require_user
from multifaucet.chains import ChainRegistry
from multifaucet.web.contracts.chains import ChainInfo, ChainListResponse, NetworkInfo, TokenInfo

router = APIRouter(prefix="/api/faucet", tags=["chains"])


def describe_chains(registry: ChainRegistry) -> ChainListResponse:
    """Build the chain listing from the registry."""
    chains = []
    for chain in registry.list_chains():
        networks = []
        for mode, network in chain.networks.items():
            tokens = []
            for token_type in registry.supported_tokens(chain.key, mode):
                token = registry.token(chain.key, token_type)
                tokens.append(
                    TokenInfo(
                        type=token_type.value,
                        symbol=token.symbol,
                        decimals=token.decimals,
                        address=token.address_for(mode),
                    )
                )
            networks.append(
                NetworkInfo(
                    mode=mode.value,
                    name=network.name,
                    caip2=network.caip2,
                    balance_key=registry.balance_key(chain.key, mode),
                    gas_sponsored=network.gas_sponsored,
                    tokens=tokens,
                )
            )
        chains.append(
            ChainInfo(
                id=chain.key,
                name=chain.name,
                type=chain.family.value,
                networks=networks,
            )
        )
    return ChainListResponse(chains=chains, total=len(chains))


@router.get("/chains", response_model=ChainListResponse)
async def list_chains(
    user_id: str = Depends(require_user),
    registry: ChainRegistry = Depends(get_chain_registry),
) -> ChainListResponse:
    """List supported chains, network modes and tokens."""
    return describe_chains(registry)
