"""
ABI subset of the chapter payment contract (SimpleBDAGTransfer).
Only the entries the reader calls are listed.
"""

CHAPTER_PAYMENT_ABI = [
    {
        "inputs": [
            {"internalType": "uint256", "name": "_storyId", "type": "uint256"},
            {"internalType": "uint256", "name": "_chapterId", "type": "uint256"},
            {"internalType": "address", "name": "_author", "type": "address"},
        ],
        "name": "purchaseChapter",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "_storyId", "type": "uint256"},
            {"internalType": "uint256", "name": "_chapterId", "type": "uint256"},
            {"internalType": "address", "name": "_buyer", "type": "address"},
        ],
        "name": "isChapterPurchased",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "buyer", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "author", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "storyId", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "chapterId", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "timestamp", "type": "uint256"},
        ],
        "name": "ChapterPurchased",
        "type": "event",
    },
]
