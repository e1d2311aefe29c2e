"""
Scan Services

Organized by responsibility:

1. scanner_client.py - HTTP client for the self-hosted scan engine
   - scan(): one synchronous page scan via /scan-sync
   - wait_until_ready(): poll the engine health endpoint before a run

2. scan_executor.py - Sequential per-page scanning
   - execute_scans(): one ScanResult per page; failures never abort the run
   - build_result(): engine payload -> ScanResult

3. score_calculator.py - Impact-weighted page score and WCAG tag mapping

4. utils/aggregator.py - Organization-level report over all page results

5. orchestration/audit_runner.py - Health check, discovery, scan, aggregate

Page discovery itself lives in app/features/discovery.
"""
