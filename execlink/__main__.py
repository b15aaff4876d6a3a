from execlink.app.main import main

raise SystemExit(main())
