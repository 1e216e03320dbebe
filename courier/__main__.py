from courier.cli.cli import main

raise SystemExit(main())
