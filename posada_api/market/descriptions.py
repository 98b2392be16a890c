"""
Curated one-line token descriptions shown on the website.
"""

TOKEN_DESCRIPTIONS = {
    'ADA': 'Cardano native token, proof-of-stake layer-1 blockchain',
    'SNEK': 'Community memecoin on Cardano, largest by market cap',
    'MIN': 'Minswap DEX governance token, largest Cardano DEX',
    'IAG': 'Iagon decentralised storage and compute marketplace',
    'NIGHT': 'Night DEX token, concentrated liquidity on Cardano',
    'STRIKE': 'Strike Finance lending and borrowing protocol',
    'SUNDAE': 'SundaeSwap DEX governance token',
    'WMTX': 'World Mobile token, decentralised mobile network',
    'INDY': 'Indigo Protocol, synthetic assets on Cardano',
    'FLDT': 'Fluid Tokens, NFT liquidity and lending',
    'MITHR': 'Mithril, stake-based threshold multi-signatures',
    'RISE': 'Infinity Rising, community-driven Cardano project',
    'HOSKY': 'Hosky Token, the original Cardano memecoin',
    'NTX': 'NuNet, decentralised computing framework',
    'IBTC': 'Indigo synthetic Bitcoin on Cardano',
    'SURF': 'Surf Finance, yield aggregator on Cardano',
    'RSERG': 'RealSerg, Cardano community token',
    'LQ': 'Liqwid Finance, DeFi lending protocol',
    'STUFF': 'Stuff token, Cardano ecosystem utility',
    'WMT': 'World Mobile, telecom on blockchain',
    'NVL': 'Nuvola, decentralised cloud computing',
    'PALM': 'Palm NFT ecosystem token',
    'SPLASH': 'Splash Protocol, Cardano DEX token',
    'BTN': 'Butane, Cardano DeFi utility token',
    'SURGE': 'Surge Cardano, DeFi yield protocol',
    'HUNT': 'Hunt token, Cardano gaming and rewards',
    'CSWAP': 'CardSwap DEX, automated market maker',
    'VYFI': 'VyFinance, AI-powered DeFi on Cardano',
    'WRT': 'WingRiders, Cardano DEX governance token',
    'FET': 'Fetch.ai, AI and autonomous agents (bridged)',
    'AGIX': 'SingularityNET, decentralised AI marketplace (bridged)',
}


def describe(ticker: str, fallback: str = '') -> str:
    return TOKEN_DESCRIPTIONS.get(ticker.upper(), fallback)
