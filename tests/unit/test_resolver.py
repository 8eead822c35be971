"""Tests for transaction resolution."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from eth_account import Account
from web3 import Web3

from eth_fetcher.core.errors import (
    DuplicateKeyError,
    FetchError,
    NotFoundError,
    PendingError,
)
from eth_fetcher.models.transaction import Transaction
from eth_fetcher.services.resolver import (
    ResolutionOutcome,
    TransactionResolver,
    map_transaction,
    recover_sender,
)

SENDER = Account.from_key("0x" + "22" * 32)
TX_HASH = "0xabc" + "0" * 61
BLOCK_HASH = "0x111" + "0" * 61
RECIPIENT = Web3.to_checksum_address("0x" + "44" * 20)

LEGACY_TX = {
    "to": RECIPIENT,
    "value": 10**18,
    "gas": 21000,
    "gasPrice": 10**9,
    "nonce": 0,
    "chainId": 1,
    "data": b"",
}
DYNAMIC_FEE_TX = {
    "type": 2,
    "chainId": 1,
    "nonce": 3,
    "maxPriorityFeePerGas": 10**9,
    "maxFeePerGas": 3 * 10**9,
    "gas": 60000,
    "to": RECIPIENT,
    "value": 10**18,
    "data": bytes.fromhex("a9059cbb"),
    "accessList": [],
}
ACCESS_LIST_TX = {
    "type": 1,
    "chainId": 1,
    "nonce": 1,
    "gasPrice": 10**9,
    "gas": 50000,
    "to": RECIPIENT,
    "value": 0,
    "data": b"",
    "accessList": [{"address": RECIPIENT, "storageKeys": ["0x" + "00" * 31 + "01"]}],
}


def node_view(unsigned: dict, **overrides) -> dict:
    """eth_getTransactionByHash fields of a transaction signed by SENDER."""
    signed = Account.sign_transaction(unsigned, SENDER.key)
    tx = {key: value for key, value in unsigned.items() if key != "data"}
    tx.update(
        hash=signed.hash,
        type=unsigned.get("type", 0),
        input=unsigned["data"],
        v=signed.v,
        r=signed.r.to_bytes(32, "big"),
        s=signed.s.to_bytes(32, "big"),
    )
    if tx["type"]:
        tx["yParity"] = signed.v
    tx.update(overrides)
    return tx


def make_tx(tx_hash: str = TX_HASH, **overrides) -> dict:
    tx = node_view(LEGACY_TX)
    tx.update(hash=tx_hash, blockHash=BLOCK_HASH, blockNumber=42, input="0x")
    tx.update(overrides)
    return tx


def make_receipt(**overrides) -> dict:
    receipt = {
        "status": 1,
        "blockHash": BLOCK_HASH,
        "blockNumber": 42,
        "logs": [{}, {}],
        "contractAddress": None,
    }
    receipt.update(overrides)
    return receipt


class FakeTransactionStore:
    """In-memory store with the repository's contract."""

    def __init__(self):
        self.rows: dict[str, Transaction] = {}

    async def get(self, tx_hash: str) -> Transaction:
        if tx_hash not in self.rows:
            raise NotFoundError(tx_hash)
        return self.rows[tx_hash]

    async def insert(self, tx: Transaction) -> Transaction:
        if tx.transaction_hash in self.rows:
            raise DuplicateKeyError(tx.transaction_hash)
        tx.id = len(self.rows) + 1
        self.rows[tx.transaction_hash] = tx
        return tx


def make_client(txs: dict | None = None, receipts: dict | None = None) -> AsyncMock:
    """Chain client answering from dicts keyed by hash."""
    txs = {TX_HASH: make_tx()} if txs is None else txs
    receipts = {TX_HASH: make_receipt()} if receipts is None else receipts

    client = AsyncMock()
    client.get_transaction.side_effect = lambda h: txs.get(h)
    client.get_transaction_receipt.side_effect = lambda h: receipts.get(h)
    client.get_block_header.return_value = {"hash": BLOCK_HASH, "number": 42}
    return client


class TestMapTransaction:
    """Tests for mapping node responses to records."""

    def test_maps_worked_example(self):
        """Test all fields of a mined value transfer."""
        record = map_transaction(
            make_tx(),
            make_receipt(),
            {"hash": BLOCK_HASH, "number": 42},
            SENDER.address,
        )

        assert record.transaction_hash == TX_HASH
        assert record.transaction_status == 1
        assert record.block_hash == BLOCK_HASH
        assert record.block_number == 42
        assert record.from_address == SENDER.address
        assert record.to_address == Web3.to_checksum_address(RECIPIENT)
        assert record.contract_address == ""
        assert record.logs_count == 2
        assert record.input == ""
        assert record.value == "1000000000000000000"

    def test_failed_receipt_status(self):
        """Test a reverted transaction is stored with status 0."""
        record = map_transaction(
            make_tx(), make_receipt(status=0), {"hash": BLOCK_HASH, "number": 42}, SENDER.address
        )
        assert record.transaction_status == 0

    def test_contract_creation(self):
        """Test contract creation has no recipient and a contract address."""
        created = "0x" + "55" * 20
        record = map_transaction(
            make_tx(to=None, value=0),
            make_receipt(contractAddress=created, logs=[]),
            {"hash": BLOCK_HASH, "number": 42},
            SENDER.address,
        )

        assert record.to_address is None
        assert record.contract_address == Web3.to_checksum_address(created)
        assert record.logs_count == 0
        assert record.value == "0"

    def test_input_bytes_without_prefix(self):
        """Test call data is stored as hex without 0x."""
        record = map_transaction(
            make_tx(input=bytes.fromhex("a9059cbb")),
            make_receipt(),
            {"hash": BLOCK_HASH, "number": 42},
            SENDER.address,
        )
        assert record.input == "a9059cbb"


class TestTransactionResolver:
    """Tests for TransactionResolver."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = FakeTransactionStore()
        self.client = make_client()
        self.resolver = TransactionResolver(self.client, self.store)

    @pytest.mark.asyncio
    async def test_fetches_and_stores_on_miss(self):
        """Test a store miss queries the chain and stores the record."""
        resolution = await self.resolver.resolve(TX_HASH)

        assert resolution.outcome == ResolutionOutcome.FETCHED
        assert resolution.record.from_address == SENDER.address
        assert resolution.record.block_number == 42
        assert TX_HASH in self.store.rows

    @pytest.mark.asyncio
    async def test_second_resolve_is_cache_hit(self):
        """Test resolving twice queries the chain once."""
        first = await self.resolver.resolve(TX_HASH)
        second = await self.resolver.resolve(TX_HASH)

        assert second.outcome == ResolutionOutcome.CACHED
        assert second.record is first.record
        self.client.get_transaction.assert_awaited_once()
        self.client.get_transaction_receipt.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_transaction_raises_fetch_error(self):
        """Test a hash unknown to the node is a fetch error."""
        with pytest.raises(FetchError) as exc_info:
            await self.resolver.resolve("0xdead")

        assert exc_info.value.tx_hash == "0xdead"
        assert not self.store.rows

    @pytest.mark.asyncio
    async def test_unmined_transaction_is_pending(self):
        """Test a transaction without a block is pending and not stored."""
        self.client = make_client(
            txs={TX_HASH: make_tx(blockHash=None, blockNumber=None)}, receipts={}
        )
        resolver = TransactionResolver(self.client, self.store)

        with pytest.raises(PendingError):
            await resolver.resolve(TX_HASH)

        assert not self.store.rows
        self.client.get_transaction_receipt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_receipt_is_pending(self):
        """Test a mined transaction without receipt yet is pending."""
        self.client = make_client(receipts={})
        resolver = TransactionResolver(self.client, self.store)

        with pytest.raises(PendingError):
            await resolver.resolve(TX_HASH)

        assert not self.store.rows

    @pytest.mark.asyncio
    async def test_node_failure_wrapped_as_fetch_error(self):
        """Test unexpected client errors surface as FetchError."""
        self.client.get_block_header.side_effect = ConnectionError("reset")

        with pytest.raises(FetchError):
            await self.resolver.resolve(TX_HASH)

    @pytest.mark.asyncio
    async def test_unrecoverable_sender_is_fetch_error(self):
        """Test a transaction whose envelope cannot be rebuilt fails."""
        client = make_client(txs={TX_HASH: make_tx(type=0x7E)})
        resolver = TransactionResolver(client, self.store)

        with pytest.raises(FetchError) as exc_info:
            await resolver.resolve(TX_HASH)

        assert exc_info.value.tx_hash == TX_HASH
        assert not self.store.rows

    @pytest.mark.asyncio
    async def test_mixed_case_hash_hits_store(self):
        """Test a hash differing only in case is served from the store."""
        await self.resolver.resolve(TX_HASH)

        resolution = await self.resolver.resolve(TX_HASH.upper().replace("0X", "0x"))

        assert resolution.outcome == ResolutionOutcome.CACHED
        self.client.get_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_insert_rereads_winner(self):
        """Test losing an insert race returns the stored row."""
        winner = Transaction(transaction_hash=TX_HASH, block_number=42)
        store = AsyncMock()
        store.get.side_effect = [NotFoundError(TX_HASH), winner]
        store.insert.side_effect = DuplicateKeyError(TX_HASH)
        resolver = TransactionResolver(self.client, store)

        resolution = await resolver.resolve(TX_HASH)

        assert resolution.record is winner
        assert store.get.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_resolution_stores_one_row(self):
        """Test concurrent resolvers of one hash agree on one record."""
        results = await asyncio.gather(
            self.resolver.resolve(TX_HASH),
            TransactionResolver(self.client, self.store).resolve(TX_HASH),
        )

        assert len(self.store.rows) == 1
        assert results[0].record.id == results[1].record.id


class TestResolveBatch:
    """Tests for batch resolution."""

    @pytest.mark.asyncio
    async def test_preserves_order_and_dedupes(self):
        """Test results follow input order with duplicates removed."""
        other = "0x" + "cd" * 32
        client = make_client(
            txs={TX_HASH: make_tx(), other: make_tx(other)},
            receipts={TX_HASH: make_receipt(), other: make_receipt()},
        )
        resolver = TransactionResolver(client, FakeTransactionStore())

        records = await resolver.resolve_batch([f"{other}, {TX_HASH}", other])

        assert [r.transaction_hash for r in records] == [other, TX_HASH]

    @pytest.mark.asyncio
    async def test_first_failure_aborts_batch(self):
        """Test later hashes are not queried after a failure."""
        later = "0x" + "ef" * 32
        client = make_client()
        store = FakeTransactionStore()
        resolver = TransactionResolver(client, store)

        with pytest.raises(FetchError):
            await resolver.resolve_batch([TX_HASH, "0xdead", later])

        queried = [call.args[0] for call in client.get_transaction.await_args_list]
        assert queried == [TX_HASH, "0xdead"]
        assert list(store.rows) == [TX_HASH]

    @pytest.mark.asyncio
    async def test_pending_aborts_batch(self):
        """Test a pending hash aborts the batch with PendingError."""
        client = make_client(txs={TX_HASH: make_tx(blockHash=None)}, receipts={})
        resolver = TransactionResolver(client, FakeTransactionStore())

        with pytest.raises(PendingError):
            await resolver.resolve_batch([TX_HASH])


class TestRecoverSender:
    """Tests for sender recovery from node transaction fields."""

    def test_legacy(self):
        """Test an EIP-155 legacy transaction."""
        assert recover_sender(node_view(LEGACY_TX)) == SENDER.address

    def test_dynamic_fee(self):
        """Test a type 2 transaction using yParity."""
        assert recover_sender(node_view(DYNAMIC_FEE_TX)) == SENDER.address

    def test_access_list(self):
        """Test a type 1 transaction with a non-empty access list."""
        assert recover_sender(node_view(ACCESS_LIST_TX)) == SENDER.address

    def test_hex_string_fields(self):
        """Test fields as raw JSON-RPC hex strings."""
        tx = node_view(DYNAMIC_FEE_TX)
        rpc_tx = {
            key: hex(value) if isinstance(value, int) else value for key, value in tx.items()
        }
        rpc_tx.update(
            r=Web3.to_hex(tx["r"]),
            s=Web3.to_hex(tx["s"]),
            input=Web3.to_hex(tx["input"]),
        )
        del rpc_tx["yParity"]

        assert recover_sender(rpc_tx) == SENDER.address

    def test_contract_creation(self):
        """Test a transaction without recipient."""
        unsigned = dict(DYNAMIC_FEE_TX, to=b"", data=b"\x60\x00")

        assert recover_sender(node_view(unsigned, to=None)) == SENDER.address

    def test_tampered_fields_recover_other_address(self):
        """Test the recovered sender depends on the signed payload."""
        assert recover_sender(node_view(LEGACY_TX, value=1)) != SENDER.address

    def test_missing_signature(self):
        """Test a transaction without signature fields is rejected."""
        tx = node_view(LEGACY_TX)
        del tx["r"]

        with pytest.raises(ValueError):
            recover_sender(tx)
